"""Utility modules for ScanBrief.

- config_loader: policy defaults, config.json, prompts and credentials
- logger: console and server log handlers with credential redaction
"""

from .config_loader import ConfigLoader, mask_secret
from .logger import get_logger, setup_logging

__all__ = [
    'ConfigLoader',
    'mask_secret',
    'get_logger',
    'setup_logging',
]
