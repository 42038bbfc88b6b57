"""
Client construction from a market name or a settings dictionary.
"""

from typing import Any, Dict, Optional, Type, Union

from binance_client.execution.client_base import BaseMarketClient
from binance_client.execution.futures_api import FuturesClient
from binance_client.execution.markets import Market
from binance_client.execution.signing import DEFAULT_RECV_WINDOW, Credentials
from binance_client.execution.spot_api import SpotClient
from binance_client.utils import config as settings


# Market client registry
CLIENT_CLASSES: Dict[Market, Type[BaseMarketClient]] = {
    Market.SPOT: SpotClient,
    Market.FUTURES: FuturesClient,
}


def create_client(
    market: Union[Market, str],
    credentials: Optional[Credentials] = None,
    testnet: bool = False,
    recv_window: int = DEFAULT_RECV_WINDOW,
) -> BaseMarketClient:
    """
    Convenience function to create a market client.

    Args:
        market: Market or its name ("spot", "futures")
        credentials: API key pair (None for public endpoints only)
        testnet: Use testnet
        recv_window: Freshness window in ms for signed requests

    Returns:
        SpotClient or FuturesClient
    """
    if isinstance(market, str):
        try:
            market = Market(market.lower())
        except ValueError:
            raise ValueError(f"Unknown market: {market}. Supported: spot, futures")

    client_class = CLIENT_CLASSES[market]
    return client_class(credentials=credentials, testnet=testnet, recv_window=recv_window)


def create_client_from_config(config: Dict[str, Any]) -> BaseMarketClient:
    """
    Create a market client from configuration dictionary.

    Credentials are read from the environment variables the config names.
    """
    exchange = config.get("exchange") or {}

    return create_client(
        exchange.get("market", "futures"),
        credentials=settings.get_api_credentials(config),
        testnet=exchange.get("testnet", False),
        recv_window=exchange.get("recv_window", DEFAULT_RECV_WINDOW),
    )
