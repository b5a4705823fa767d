import logging

import pytest

from scanbrief.utils.logger import HANDLER_NAME, get_logger, setup_logging

from .conftest import OPENAI_KEY


def test_get_logger_does_not_attach_handlers():
    log = get_logger("scanbrief.services.example")

    assert log.name == "scanbrief.services.example"
    assert logging.getLogger("scanbrief").handlers == []


def test_get_logger_prefixes_namespace():
    assert get_logger("tools").name == "scanbrief.tools"
    assert get_logger("scanbrief").name == "scanbrief"


def test_console_style_tags_level(capsys):
    setup_logging()

    get_logger("cli").warning("Input truncated to %d characters", 20000)

    err = capsys.readouterr().err
    assert "[WARNING]" in err
    assert "Input truncated to 20000 characters" in err


def test_server_style_carries_logger_name(capsys):
    setup_logging(style="server")

    get_logger("scanbrief.ui").info("Server running")

    err = capsys.readouterr().err
    assert "INFO" in err
    assert "[scanbrief.ui] Server running" in err


def test_credentials_are_redacted(capsys):
    setup_logging(secrets=[OPENAI_KEY, None])

    get_logger("invoker").error("Provider said: bad key %s", OPENAI_KEY)

    err = capsys.readouterr().err
    assert OPENAI_KEY not in err
    assert "bad key [REDACTED]" in err


def test_levels(capsys):
    setup_logging(quiet=True, verbose=True)
    get_logger("x").info("hidden")
    assert "hidden" not in capsys.readouterr().err

    setup_logging(verbose=True)
    get_logger("x").debug("shown")
    assert "shown" in capsys.readouterr().err


def test_repeated_setup_keeps_one_handler():
    setup_logging()
    setup_logging(style="server")

    names = [h.get_name() for h in logging.getLogger("scanbrief").handlers]
    assert names == [HANDLER_NAME]


def test_unknown_style_is_rejected():
    with pytest.raises(ValueError, match="Unknown logging style"):
        setup_logging(style="json")
