"""
Base class for the market REST clients.

Holds the transport and the single decode path every endpoint goes
through. Subclasses only map endpoints to request forms and parsers.
"""

from typing import Any, Optional

from loguru import logger

from binance_client.execution.decoder import Parser, decode_response
from binance_client.execution.markets import Market
from binance_client.execution.signing import DEFAULT_RECV_WINDOW, Credentials
from binance_client.execution.transport import RawResponse, RestTransport


def list_of(parser: Parser) -> Parser:
    """Parser for a JSON array of items."""
    return lambda items: [parser(item) for item in items]


class BaseMarketClient:
    """Common plumbing for SpotClient and FuturesClient."""

    market: Market

    def __init__(
        self,
        credentials: Optional[Credentials] = None,
        testnet: bool = False,
        recv_window: int = DEFAULT_RECV_WINDOW,
        transport: Optional[RestTransport] = None,
    ):
        """
        Initialize API client.

        Args:
            credentials: API key pair (None for public endpoints only)
            testnet: Use testnet endpoint
            recv_window: Freshness window in ms for signed requests
            transport: Preconfigured transport (overrides the above)
        """
        self.testnet = testnet
        self.transport = transport or RestTransport(
            self.market.rest_url_for(testnet),
            credentials=credentials,
            recv_window=recv_window,
        )
        logger.info(f"{type(self).__name__} initialized (testnet={testnet})")

    @property
    def has_credentials(self) -> bool:
        """Check if API credentials are set."""
        return self.transport.has_credentials

    async def close(self) -> None:
        await self.transport.close()

    async def __aenter__(self):
        await self.transport.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def decode_response(self, response: RawResponse, parser: Optional[Parser] = None) -> Any:
        return decode_response(response.status, response.body, parser)
