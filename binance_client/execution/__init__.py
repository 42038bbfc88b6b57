"""Request signing, REST transport, response decoding and market clients."""

from binance_client.execution.errors import (
    BinanceError,
    APIError,
    DecodeError,
    MissingCredentialsError,
    UnexpectedFrameError,
)
from binance_client.execution.signing import (
    DEFAULT_RECV_WINDOW,
    Credentials,
    compute_signature,
    current_timestamp_ms,
    sign_form,
)
from binance_client.execution.markets import Market
from binance_client.execution.transport import RawResponse, RestTransport
from binance_client.execution.decoder import decode_response
from binance_client.execution.client_base import BaseMarketClient
from binance_client.execution.futures_api import FuturesClient
from binance_client.execution.spot_api import SpotClient
from binance_client.execution.client_factory import (
    create_client,
    create_client_from_config,
)

__all__ = [
    # Errors
    "BinanceError",
    "APIError",
    "DecodeError",
    "MissingCredentialsError",
    "UnexpectedFrameError",
    # Signing
    "DEFAULT_RECV_WINDOW",
    "Credentials",
    "compute_signature",
    "current_timestamp_ms",
    "sign_form",
    # Transport
    "Market",
    "RawResponse",
    "RestTransport",
    "decode_response",
    # Clients
    "BaseMarketClient",
    "FuturesClient",
    "SpotClient",
    "create_client",
    "create_client_from_config",
]
