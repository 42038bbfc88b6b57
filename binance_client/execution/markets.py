"""Market endpoints (spot vs. USD-M futures)."""

from enum import Enum


class Market(Enum):
    """Supported markets."""
    SPOT = "spot"
    FUTURES = "futures"

    @property
    def rest_url(self) -> str:
        return _REST_URLS[(self, False)]

    @property
    def ws_url(self) -> str:
        return _WS_URLS[(self, False)]

    def rest_url_for(self, testnet: bool) -> str:
        """REST base URL for mainnet or testnet."""
        return _REST_URLS[(self, testnet)]

    def ws_url_for(self, testnet: bool) -> str:
        """WebSocket base URL for mainnet or testnet."""
        return _WS_URLS[(self, testnet)]


_REST_URLS = {
    (Market.SPOT, False): "https://api.binance.com",
    (Market.SPOT, True): "https://testnet.binance.vision",
    (Market.FUTURES, False): "https://fapi.binance.com",
    (Market.FUTURES, True): "https://testnet.binancefuture.com",
}

_WS_URLS = {
    (Market.SPOT, False): "wss://stream.binance.com:9443",
    (Market.SPOT, True): "wss://testnet.binance.vision",
    (Market.FUTURES, False): "wss://fstream.binance.com",
    (Market.FUTURES, True): "wss://stream.binancefuture.com",
}
