"""
Configuration loading and validation.

Settings come from a YAML file; API credentials come from the
environment (optionally populated from a .env file by the entry point).
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from loguru import logger

from binance_client.execution.signing import Credentials

MARKETS = ("spot", "futures")
MAX_RECV_WINDOW = 60000


def load_config(config_path: str = "config/settings.yaml") -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
    """
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, "r") as f:
        config = yaml.safe_load(f) or {}

    logger.debug(f"Loaded config from {config_path}")
    return config


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration.

    Args:
        config: Configuration dictionary

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    if "exchange" not in config:
        errors.append("Missing required section: exchange")
        return errors

    exchange = config.get("exchange") or {}

    market = exchange.get("market", "futures")
    if market not in MARKETS:
        errors.append(f"exchange.market must be spot or futures, got {market}")

    if not isinstance(exchange.get("testnet", False), bool):
        errors.append("exchange.testnet must be true or false")

    recv_window = exchange.get("recv_window", 1000)
    if not isinstance(recv_window, int) or not 1 <= recv_window <= MAX_RECV_WINDOW:
        errors.append(f"exchange.recv_window must be 1-{MAX_RECV_WINDOW}, got {recv_window}")

    stream = config.get("stream") or {}

    for flag in ("emit_pings", "strict"):
        if flag in stream and not isinstance(stream[flag], bool):
            errors.append(f"stream.{flag} must be true or false")

    channels = stream.get("channels", [])
    if not isinstance(channels, list) or not all(isinstance(c, str) for c in channels):
        errors.append("stream.channels must be a list of stream names")

    return errors


def get_api_credentials(config: Dict[str, Any]) -> Optional[Credentials]:
    """
    Get API credentials from environment variables.

    Args:
        config: Configuration dictionary

    Returns:
        Credentials, or None if either variable is unset (public endpoints only)
    """
    exchange = config.get("exchange") or {}
    api_key_env = exchange.get("api_key_env", "BINANCE_API_KEY")
    api_secret_env = exchange.get("api_secret_env", "BINANCE_API_SECRET")

    api_key = os.getenv(api_key_env, "")
    api_secret = os.getenv(api_secret_env, "")

    if not api_key or not api_secret:
        logger.debug(f"No credentials in {api_key_env}/{api_secret_env}")
        return None

    return Credentials(api_key, api_secret)


def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge multiple configuration dictionaries.

    Later configs override earlier ones.
    """
    result = {}

    for config in configs:
        result = _deep_merge(result, config)

    return result


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def print_config_summary(config: Dict[str, Any]) -> None:
    """Log a summary of the configuration."""
    exchange = config.get("exchange") or {}
    stream = config.get("stream") or {}

    logger.info("-" * 40)
    logger.info("Configuration Summary")
    logger.info("-" * 40)

    env = "TESTNET" if exchange.get("testnet", False) else "MAINNET"
    logger.info(f"Market: {exchange.get('market', 'futures')} ({env})")
    logger.info(f"recvWindow: {exchange.get('recv_window', 1000)} ms")
    logger.info(f"Channels: {stream.get('channels', [])}")

    logger.info("-" * 40)
