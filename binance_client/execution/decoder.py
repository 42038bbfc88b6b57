"""
Response decoding.

Maps an HTTP status and body to a typed value or a classified error.
A non-2xx response always becomes an APIError, even when the body is
empty or an HTML error page.
"""

import json
from decimal import InvalidOperation
from typing import Any, Callable, Optional

from loguru import logger

from binance_client.execution.errors import APIError, DecodeError

Parser = Callable[[Any], Any]

_DECODE_ERRORS = (
    ValueError,
    LookupError,
    TypeError,
    AttributeError,
    InvalidOperation,
    RecursionError,
)


def _is_error_body(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and isinstance(value.get("code"), int)
        and not isinstance(value.get("code"), bool)
        and isinstance(value.get("msg"), str)
    )


def decode_response(status: int, body: str, parser: Optional[Parser] = None) -> Any:
    """
    Decode a raw response.

    Args:
        status: HTTP status code
        body: Response body text
        parser: Maps the parsed JSON to a typed result (raw JSON if None)

    Returns:
        Parsed result

    Raises:
        DecodeError: 2xx body that is not valid JSON or does not fit parser
        APIError: Any non-2xx response
    """
    if 200 <= status < 300:
        try:
            value = json.loads(body)
            return parser(value) if parser else value
        except _DECODE_ERRORS as e:
            logger.warning(f"Failed to decode {status} response: {e!r}")
            raise DecodeError(e, body) from e

    # Error, attempt to decode the body; if that fails build one from the status
    try:
        value = json.loads(body)
    except (ValueError, RecursionError):
        value = None

    if _is_error_body(value):
        error = APIError.from_binance(value)
    else:
        error = APIError(status, body)

    logger.warning(f"API error (HTTP {status}): {error}")
    raise error
