"""
Binance WebSocket stream client.

Connects to a single stream (``/ws/<name>``) or a combined stream
(``/stream?streams=a/b/c``) and turns frames into StreamEvents.

Pings are answered inline, before the next frame is read. A failed
pong is logged and ignored; the server tolerates an occasional miss.
The connection does not reconnect on its own: ``next()`` returning None
means the stream ended and the caller decides what to do.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import aiohttp
from aiohttp import WSMsgType
from loguru import logger

from binance_client.data.events import EventDecoder, StreamEvent
from binance_client.execution.markets import Market

_CLOSE_TYPES = (WSMsgType.CLOSE, WSMsgType.CLOSING, WSMsgType.CLOSED)
_DISCARD_TYPES = (WSMsgType.PONG, WSMsgType.BINARY)


class BinanceWebSocket:
    """
    Async WebSocket client for one Binance stream connection.

    Single consumer: one task reads events in wire order.
    """

    def __init__(
        self,
        market: Market = Market.FUTURES,
        testnet: bool = False,
        emit_pings: bool = False,
        decoder: Optional[EventDecoder] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize WebSocket client.

        Args:
            market: Spot or futures stream host
            testnet: Use testnet endpoint
            emit_pings: Also return PingEvent after answering a ping
            decoder: Event decoder (strict EventDecoder by default)
            session: Existing aiohttp session to reuse (not closed by us)
        """
        self.market = market
        self.testnet = testnet
        self.emit_pings = emit_pings
        self.decoder = decoder or EventDecoder()

        self._session = session
        self._owns_session = session is None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._url: Optional[str] = None
        self._request_id = 0

        # Stats
        self._messages_received = 0
        self._pings_answered = 0
        self._last_message_time: Optional[datetime] = None

    @property
    def ws_url(self) -> str:
        """Get WebSocket base URL based on market and environment."""
        return self.market.ws_url_for(self.testnet)

    @property
    def is_connected(self) -> bool:
        """Check if WebSocket is connected."""
        return self._ws is not None and not self._ws.closed

    @property
    def stats(self) -> Dict[str, Any]:
        """Get connection statistics."""
        return {
            "connected": self.is_connected,
            "url": self._url,
            "messages_received": self._messages_received,
            "pings_answered": self._pings_answered,
            "last_message_time": self._last_message_time,
        }

    # =========================================================================
    # Connection Management
    # =========================================================================

    async def connect(self, endpoint: str) -> "BinanceWebSocket":
        """
        Open a connection to ``<ws_url>/<endpoint>``.

        Args:
            endpoint: Path below the stream host, e.g. ``ws/btcusdt@aggTrade``
        """
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True

        url = f"{self.ws_url}/{endpoint.lstrip('/')}"
        logger.info(f"Connecting to WebSocket: {url[:80]}")

        try:
            # autoping=False: pings are delivered to next() and answered there
            self._ws = await self._session.ws_connect(url, autoping=False)
        except (aiohttp.ClientError, OSError) as e:
            logger.error(f"Failed to connect: {e!r}")
            raise

        self._url = url
        logger.info(f"Connected to Binance {self.market.value} stream")
        return self

    async def connect_stream(self, name: str) -> "BinanceWebSocket":
        """Connect to a single stream, e.g. ``btcusdt@aggTrade``."""
        return await self.connect(f"ws/{name}")

    async def connect_combined(self, names: Sequence[str]) -> "BinanceWebSocket":
        """Connect to several streams multiplexed over one socket."""
        if not names:
            raise ValueError("At least one stream name is required")
        return await self.connect(f"stream?streams={'/'.join(names)}")

    async def close(self) -> None:
        """Close the connection gracefully."""
        if self._ws is not None:
            await self._ws.close()
            self._ws = None
            logger.info("Disconnected from WebSocket")

        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "BinanceWebSocket":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # =========================================================================
    # Message Processing
    # =========================================================================

    async def next(self) -> Optional[StreamEvent]:
        """
        Read until the next event.

        Returns:
            The decoded event, or None once the server closed the stream

        Raises:
            aiohttp.ClientError: Transport failure on the socket
            UnexpectedFrameError: Frame kind the decoder does not accept
        """
        if self._ws is None:
            raise RuntimeError("WebSocket is not connected")

        while True:
            message = await self._ws.receive()

            if message.type == WSMsgType.PING:
                await self._answer_ping(message.data)
                if self.emit_pings:
                    return self.decoder.decode_message(message)
                continue

            if message.type == WSMsgType.TEXT:
                self._messages_received += 1
                self._last_message_time = datetime.now(timezone.utc)
                return self.decoder.decode_message(message)

            if message.type in _DISCARD_TYPES:
                logger.debug(f"Discarding {message.type.name} frame")
                continue

            if message.type in _CLOSE_TYPES:
                logger.info(f"WebSocket closed ({message.type.name}, code={self._ws.close_code})")
                return None

            if message.type == WSMsgType.ERROR:
                error = message.data
                logger.error(f"WebSocket error: {error!r}")
                if isinstance(error, BaseException):
                    raise error
                raise aiohttp.ClientError(str(error))

            return self.decoder.decode_message(message)

    async def _answer_ping(self, payload: bytes) -> None:
        try:
            await self._ws.pong(payload)
        except (aiohttp.ClientError, OSError, RuntimeError) as e:
            logger.warning(f"Failed to send pong: {e!r}")
        else:
            self._pings_answered += 1

    def __aiter__(self) -> "BinanceWebSocket":
        return self

    async def __anext__(self) -> StreamEvent:
        event = await self.next()
        if event is None:
            raise StopAsyncIteration
        return event

    # =========================================================================
    # Live Subscription
    # =========================================================================

    async def _send_request(self, method: str, streams: List[str]) -> int:
        if self._ws is None:
            raise RuntimeError("WebSocket is not connected")

        self._request_id += 1
        await self._ws.send_str(json.dumps({
            "method": method,
            "params": streams,
            "id": self._request_id,
        }))
        return self._request_id

    async def subscribe(self, streams: List[str]) -> int:
        """
        Subscribe to additional streams on this connection.

        The acknowledgement arrives as an UnknownEvent.

        Returns:
            Request id of the SUBSCRIBE request
        """
        request_id = await self._send_request("SUBSCRIBE", streams)
        logger.info(f"Subscribed to: {streams}")
        return request_id

    async def unsubscribe(self, streams: List[str]) -> int:
        """Unsubscribe from streams; returns the request id."""
        request_id = await self._send_request("UNSUBSCRIBE", streams)
        logger.info(f"Unsubscribed from: {streams}")
        return request_id


# =============================================================================
# Helpers
# =============================================================================

async def connect(endpoint: str, market: Market = Market.FUTURES, **kwargs) -> BinanceWebSocket:
    """Create a client and connect it to endpoint."""
    return await BinanceWebSocket(market=market, **kwargs).connect(endpoint)


async def connect_stream(name: str, market: Market = Market.FUTURES, **kwargs) -> BinanceWebSocket:
    """Create a client connected to one stream."""
    return await BinanceWebSocket(market=market, **kwargs).connect_stream(name)


async def connect_combined(
    names: Sequence[str],
    market: Market = Market.FUTURES,
    **kwargs,
) -> BinanceWebSocket:
    """Create a client connected to a combined stream."""
    return await BinanceWebSocket(market=market, **kwargs).connect_combined(names)


def create_websocket_from_config(config: dict) -> BinanceWebSocket:
    """
    Create BinanceWebSocket from configuration dictionary.

    Args:
        config: Configuration dictionary (from settings.yaml)

    Returns:
        Configured, not yet connected BinanceWebSocket
    """
    exchange_config = config.get("exchange", {})
    stream_config = config.get("stream", {})

    return BinanceWebSocket(
        market=Market(exchange_config.get("market", "futures")),
        testnet=exchange_config.get("testnet", False),
        emit_pings=stream_config.get("emit_pings", False),
        decoder=EventDecoder(strict=stream_config.get("strict", True)),
    )
