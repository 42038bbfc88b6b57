"""
Logging configuration for the client.

Uses loguru; every sink redacts API keys, secrets and signatures.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from binance_client.utils.security import SecretFilter

DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def _strip_markup(format_string: str) -> str:
    for tag in ("green", "level", "cyan"):
        format_string = format_string.replace(f"<{tag}>", "").replace(f"</{tag}>", "")
    return format_string


def setup_logger(
    level: str = "INFO",
    log_file: Optional[str] = None,
    rotation: str = "1 day",
    retention: str = "30 days",
    format_string: Optional[str] = None,
) -> None:
    """
    Configure the logger for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Path to log file (None for console only)
        rotation: When to rotate log files
        retention: How long to keep old log files
        format_string: Custom format string
    """
    # Remove default handler
    logger.remove()

    if format_string is None:
        format_string = DEFAULT_FORMAT

    logger.add(
        sys.stdout,
        format=format_string,
        level=level,
        colorize=True,
        filter=SecretFilter(),
    )

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_file,
            format=_strip_markup(format_string),
            level=level,
            rotation=rotation,
            retention=retention,
            compression="gz",
            filter=SecretFilter(),
        )

    logger.info(f"Logger initialized with level={level}")


def get_logger(name: str):
    """
    Get a logger instance with a specific name.

    Args:
        name: Logger name (usually module name)

    Returns:
        Logger instance bound with the name
    """
    return logger.bind(name=name)


def setup_logger_from_config(config: dict, level: Optional[str] = None) -> None:
    """
    Configure the logger from the ``logging`` section of a settings dict.

    Args:
        config: Configuration dictionary (from settings.yaml)
        level: Overrides ``logging.level`` when given (e.g. from the command line)
    """
    log_config = config.get("logging") or {}

    setup_logger(
        level=level or log_config.get("level", "INFO"),
        log_file=log_config.get("file"),
        rotation=log_config.get("rotation", "1 day"),
        retention=log_config.get("retention", "30 days"),
    )
