"""
HTTP transport for the Binance REST API.

Sends requests and hands back the raw status and body. Interpreting
the status is the decoder's job.
"""

import asyncio
from dataclasses import dataclass
from typing import Dict, Optional

import aiohttp
from loguru import logger
from yarl import URL

from binance_client.execution.signing import (
    DEFAULT_RECV_WINDOW,
    Credentials,
    sign_form,
)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass(frozen=True)
class RawResponse:
    """Undecoded HTTP response."""
    status: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class RestTransport:
    """
    Async HTTP client for one Binance REST base URL.

    Safe to share between tasks: every signed call builds a fresh form
    with its own timestamp, and the credentials are never mutated.
    """

    def __init__(
        self,
        base_url: str,
        credentials: Optional[Credentials] = None,
        recv_window: int = DEFAULT_RECV_WINDOW,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = 10.0,
    ):
        """
        Initialize transport.

        Args:
            base_url: REST root, e.g. https://fapi.binance.com
            credentials: API key pair (None for public endpoints only)
            recv_window: Freshness window in ms for signed requests
            session: Existing aiohttp session to reuse (not closed by us)
            timeout: Total request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.credentials = credentials
        self.recv_window = recv_window
        self.timeout = timeout

        self._session = session
        self._owns_session = session is None

    @property
    def has_credentials(self) -> bool:
        """Check if API credentials are set."""
        return self.credentials is not None

    # =========================================================================
    # Session Management
    # =========================================================================

    async def connect(self) -> None:
        """Create HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
            logger.debug("HTTP session created")

    async def close(self) -> None:
        """Close HTTP session."""
        if self._session and self._owns_session:
            await self._session.close()
            logger.debug("HTTP session closed")
        self._session = None

    async def __aenter__(self) -> "RestTransport":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # =========================================================================
    # Request Building
    # =========================================================================

    def url(self, endpoint: str, query: Optional[str] = None) -> str:
        """Full URL for endpoint with an optional, already-encoded query."""
        url = f"{self.base_url}{endpoint}"
        if query:
            url = f"{url}?{query}"
        return url

    def headers(self) -> Dict[str, str]:
        """Request headers; the API key header only when credentials exist."""
        headers = {"Content-Type": FORM_CONTENT_TYPE}
        if self.credentials is not None:
            headers["X-MBX-APIKEY"] = self.credentials.api_key
        return headers

    def sign(self, form: Optional[str] = None, timestamp: Optional[int] = None) -> str:
        """Append recvWindow, timestamp and signature to form."""
        secret = self.credentials.api_secret if self.credentials else None
        return sign_form(form, secret, timestamp=timestamp, recv_window=self.recv_window)

    # =========================================================================
    # Requests
    # =========================================================================

    async def _send(
        self,
        method: str,
        endpoint: str,
        query: Optional[str] = None,
        body: Optional[str] = None,
    ) -> RawResponse:
        await self.connect()

        # encoded=True: the signed string goes out byte-for-byte
        url = URL(self.url(endpoint, query), encoded=True)

        try:
            async with self._session.request(
                method, url, data=body, headers=self.headers()
            ) as resp:
                text = await resp.text()
                logger.debug(f"{method} {endpoint} -> {resp.status}")
                return RawResponse(resp.status, text)

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"HTTP error on {method} {endpoint}: {e!r}")
            raise

    async def get(self, endpoint: str, query: Optional[str] = None) -> RawResponse:
        """Unauthenticated GET."""
        return await self._send("GET", endpoint, query=query)

    async def authenticated_get(self, endpoint: str, form: str = "") -> RawResponse:
        """Signed GET; the signed form is the query string."""
        return await self._send("GET", endpoint, query=self.sign(form))

    async def post(self, endpoint: str, form: str = "") -> RawResponse:
        """Signed POST; the signed form is the request body."""
        return await self._send("POST", endpoint, body=self.sign(form))

    async def put(self, endpoint: str, form: str = "") -> RawResponse:
        """Signed PUT; the signed form is the request body."""
        return await self._send("PUT", endpoint, body=self.sign(form))

    async def delete(self, endpoint: str, form: str = "") -> RawResponse:
        """Signed DELETE; the signed form is the query string."""
        return await self._send("DELETE", endpoint, query=self.sign(form))

    async def post_unsigned(self, endpoint: str, form: str = "") -> RawResponse:
        """POST carrying only the API key header (listen key creation)."""
        return await self._send("POST", endpoint, body=form or None)

    async def put_unsigned(self, endpoint: str, form: str = "") -> RawResponse:
        """PUT carrying only the API key header (spot listen key keepalive)."""
        return await self._send("PUT", endpoint, body=form or None)
