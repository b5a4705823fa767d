"""Logging setup for ScanBrief.

Modules only ever call :func:`get_logger`; nothing is attached to a handler
until an entry point (the CLI, the Flask server or the MCP lifespan) calls
:func:`setup_logging`. A host process that imports ScanBrief keeps full
control of its own handlers.

Two output styles:

* ``console``: colorama level tags, message only (CLI).
* ``server``: timestamp, level and logger name on every line (Flask, MCP).

Provider credentials handed to :func:`setup_logging` are replaced with
``[REDACTED]`` in every record the ScanBrief handler emits.
"""
import logging
import sys
from typing import Iterable, Optional

from colorama import Fore, Style

__all__ = ["get_logger", "setup_logging", "CredentialFilter"]

ROOT_LOGGER_NAME = "scanbrief"
HANDLER_NAME = "scanbrief-stderr"
SERVER_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

_LEVEL_COLOURS = {
    logging.DEBUG: Fore.WHITE,
    logging.INFO: Fore.CYAN,
    logging.WARNING: Fore.YELLOW,
    logging.ERROR: Fore.RED,
    logging.CRITICAL: Fore.RED + Style.BRIGHT,
}


class ConsoleFormatter(logging.Formatter):
    """Prefix each message with a coloured ``[LEVEL]`` tag."""

    def format(self, record: logging.LogRecord) -> str:
        colour = _LEVEL_COLOURS.get(record.levelno, "")
        return f"{colour}[{record.levelname}]{Style.RESET_ALL} {super().format(record)}"


class CredentialFilter(logging.Filter):
    """Scrub known credential values from the rendered message."""

    def __init__(self, secrets: Iterable[Optional[str]] = ()):
        super().__init__()
        self.secrets = [s for s in secrets if s]

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.secrets:
            return True

        message = record.getMessage()
        scrubbed = message
        for secret in self.secrets:
            scrubbed = scrubbed.replace(secret, "[REDACTED]")
        if scrubbed != message:
            record.msg = scrubbed
            record.args = None
        return True


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    style: str = "console",
    secrets: Iterable[Optional[str]] = ()
) -> logging.Handler:
    """Attach the ScanBrief stderr handler to the ``scanbrief`` logger.

    Safe to call more than once; the previous ScanBrief handler is replaced.

    Args:
        verbose: Log at DEBUG
        quiet: Log at WARNING (wins over *verbose*)
        style: ``"console"`` or ``"server"``
        secrets: Credential values to redact from log output

    Returns:
        The installed handler
    """
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    if style == "server":
        formatter = logging.Formatter(SERVER_FORMAT)
    elif style == "console":
        formatter = ConsoleFormatter("%(message)s")
    else:
        raise ValueError(f"Unknown logging style: {style}")

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for existing in list(root.handlers):
        if existing.get_name() == HANDLER_NAME:
            root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(formatter)
    handler.addFilter(CredentialFilter(secrets))

    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False
    return handler


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``scanbrief`` namespace."""
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
