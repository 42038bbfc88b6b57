"""
Request signing for Binance signed endpoints.

The exchange checks that the signature covers exactly the bytes it
receives, and that the timestamp is within recvWindow of its own clock.
Forms are therefore built as plain strings, extended in a fixed order
and never re-encoded after signing.
"""

import hashlib
import hmac
import time
from dataclasses import dataclass, field
from typing import Optional

from binance_client.execution.errors import MissingCredentialsError
from binance_client.utils.security import mask_string

DEFAULT_RECV_WINDOW = 1000  # ms


@dataclass(frozen=True)
class Credentials:
    """API key pair. The secret is only ever used as the HMAC key."""
    api_key: str
    api_secret: str = field(repr=False)

    def __repr__(self) -> str:
        return f"Credentials(api_key={mask_string(self.api_key)!r})"


def current_timestamp_ms() -> int:
    """Wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def compute_signature(secret: Optional[str], payload: str) -> str:
    """
    Compute the lowercase hex HMAC-SHA256 of payload.

    Args:
        secret: API secret used as the HMAC key
        payload: Exact string that will be sent

    Returns:
        64-character hex digest

    Raises:
        MissingCredentialsError: If no secret is available
    """
    if not secret:
        raise MissingCredentialsError()

    return hmac.new(
        secret.encode("utf-8"),
        payload.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def sign_form(
    form: Optional[str],
    secret: Optional[str],
    timestamp: Optional[int] = None,
    recv_window: int = DEFAULT_RECV_WINDOW,
) -> str:
    """
    Append recvWindow, timestamp and signature to a form string.

    Args:
        form: Existing form-encoded parameters (may be empty)
        secret: API secret
        timestamp: Request time in ms (current time if not provided)
        recv_window: Freshness window in ms

    Returns:
        ``<form>&recvWindow=<w>&timestamp=<t>&signature=<hex>``
    """
    if timestamp is None:
        timestamp = current_timestamp_ms()

    suffix = f"recvWindow={recv_window}&timestamp={timestamp}"
    payload = f"{form}&{suffix}" if form else suffix
    signature = compute_signature(secret, payload)

    return f"{payload}&signature={signature}"
