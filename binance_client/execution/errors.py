"""
Error taxonomy for the Binance client.

Transport failures (aiohttp/asyncio) are not wrapped and reach the
caller unchanged. Everything raised by this package derives from
BinanceError.
"""

from typing import Any, Dict, Optional


class BinanceError(Exception):
    """Base class for errors raised by the client."""


class APIError(BinanceError):
    """
    Error returned by the exchange for a non-2xx response.

    Either decoded from the exchange's ``{"code": ..., "msg": ...}`` body
    or synthesized from the HTTP status and raw body when the body is not
    in that shape.
    """

    def __init__(self, code: int, message: str, other: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.other = other or {}
        super().__init__(f"code: {code}, msg: {message}")

    @classmethod
    def from_binance(cls, data: dict) -> "APIError":
        """Create from a Binance error body."""
        other = {k: v for k, v in data.items() if k not in ("code", "msg")}
        return cls(data["code"], data["msg"], other)


class DecodeError(BinanceError):
    """A success response whose body could not be decoded."""

    def __init__(self, error: Exception, text: str):
        self.error = error
        self.text = text
        super().__init__(f"json parse error: {error}")


class MissingCredentialsError(BinanceError):
    """A signed endpoint was called on a client without credentials."""

    def __init__(self, message: str = "API secret required for signed request"):
        super().__init__(message)


class UnexpectedFrameError(BinanceError):
    """A frame kind the stream decoder never expects to see."""

    def __init__(self, msg_type: Any):
        self.msg_type = msg_type
        super().__init__(f"Unexpected websocket frame: {msg_type!r}")
