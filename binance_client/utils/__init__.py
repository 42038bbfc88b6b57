"""
Utility modules for the client.

Configuration helpers live in ``binance_client.utils.config`` and are
imported from there.
"""

from binance_client.utils.logger import setup_logger, setup_logger_from_config, get_logger
from binance_client.utils.security import (
    SecretFilter,
    redact_secrets,
    mask_string,
)

__all__ = [
    # Logger
    "setup_logger",
    "setup_logger_from_config",
    "get_logger",
    # Security
    "SecretFilter",
    "redact_secrets",
    "mask_string",
]
