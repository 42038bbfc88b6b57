"""
Unit tests for the REST transport.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from binance_client.data.models import build_form
from binance_client.execution.errors import MissingCredentialsError
from binance_client.execution.signing import Credentials, sign_form
from binance_client.execution.transport import FORM_CONTENT_TYPE, RawResponse, RestTransport

BASE_URL = "https://fapi.binance.com"
TIMESTAMP = 1700000000000


# =============================================================================
# Test Fixtures
# =============================================================================

def make_session(status: int = 200, body: str = "{}") -> MagicMock:
    """aiohttp-like session whose request() yields a canned response."""
    response = MagicMock()
    response.status = status
    response.text = AsyncMock(return_value=body)

    session = MagicMock()
    session.request.return_value.__aenter__.return_value = response
    session.close = AsyncMock()
    return session


@pytest.fixture
def credentials():
    return Credentials("test_key", "test_secret")


@pytest.fixture
def session():
    return make_session()


@pytest.fixture
def transport(credentials, session):
    return RestTransport(BASE_URL, credentials=credentials, session=session)


@pytest.fixture
def fixed_time():
    with patch(
        "binance_client.execution.signing.current_timestamp_ms",
        return_value=TIMESTAMP,
    ):
        yield


def sent(session: MagicMock):
    """(method, url string, body, headers) of the last request."""
    args, kwargs = session.request.call_args
    method, url = args
    return method, str(url), kwargs["data"], kwargs["headers"]


# =============================================================================
# Request Building Tests
# =============================================================================

class TestRequestBuilding:
    """Tests for URL and header construction."""

    def test_url(self, transport):
        assert transport.url("/fapi/v1/order") == f"{BASE_URL}/fapi/v1/order"
        assert transport.url("/fapi/v1/order", "a=1") == f"{BASE_URL}/fapi/v1/order?a=1"

    def test_trailing_slash_stripped(self):
        transport = RestTransport(BASE_URL + "/")
        assert transport.url("/x") == f"{BASE_URL}/x"

    def test_headers_with_credentials(self, transport):
        assert transport.headers() == {
            "Content-Type": FORM_CONTENT_TYPE,
            "X-MBX-APIKEY": "test_key",
        }

    def test_headers_without_credentials(self):
        transport = RestTransport(BASE_URL)
        assert transport.headers() == {"Content-Type": FORM_CONTENT_TYPE}
        assert not transport.has_credentials

    def test_sign_uses_recv_window(self, credentials):
        transport = RestTransport(BASE_URL, credentials=credentials, recv_window=5000)
        signed = transport.sign("a=1", timestamp=TIMESTAMP)
        assert signed == sign_form("a=1", "test_secret", timestamp=TIMESTAMP, recv_window=5000)

    def test_sign_without_credentials(self):
        with pytest.raises(MissingCredentialsError):
            RestTransport(BASE_URL).sign("a=1")

    def test_raw_response_ok(self):
        assert RawResponse(200, "").ok
        assert RawResponse(204, "").ok
        assert not RawResponse(400, "").ok


# =============================================================================
# Request Tests
# =============================================================================

@pytest.mark.usefixtures("fixed_time")
class TestRequests:
    """Tests for the HTTP verbs."""

    @pytest.mark.asyncio
    async def test_get_unsigned(self, transport, session):
        response = await transport.get("/fapi/v1/klines", "symbol=BTCUSDT&interval=1m")

        method, url, body, headers = sent(session)
        assert method == "GET"
        assert url == f"{BASE_URL}/fapi/v1/klines?symbol=BTCUSDT&interval=1m"
        assert body is None
        assert headers["X-MBX-APIKEY"] == "test_key"
        assert response == RawResponse(200, "{}")

    @pytest.mark.asyncio
    async def test_authenticated_get_signs_query(self, transport, session):
        await transport.authenticated_get("/fapi/v1/openOrders", "symbol=BTCUSDT")

        method, url, body, _ = sent(session)
        expected = sign_form("symbol=BTCUSDT", "test_secret", timestamp=TIMESTAMP)
        assert method == "GET"
        assert url == f"{BASE_URL}/fapi/v1/openOrders?{expected}"
        assert body is None

    @pytest.mark.asyncio
    async def test_post_signs_body(self, transport, session):
        await transport.post("/fapi/v1/order", "symbol=BTCUSDT&side=BUY")

        method, url, body, headers = sent(session)
        assert method == "POST"
        assert url == f"{BASE_URL}/fapi/v1/order"
        assert body == sign_form("symbol=BTCUSDT&side=BUY", "test_secret", timestamp=TIMESTAMP)
        assert headers["Content-Type"] == FORM_CONTENT_TYPE

    @pytest.mark.asyncio
    async def test_put_signs_body(self, transport, session):
        await transport.put("/fapi/v1/listenKey")

        method, _, body, _ = sent(session)
        assert method == "PUT"
        assert body == sign_form("", "test_secret", timestamp=TIMESTAMP)

    @pytest.mark.asyncio
    async def test_delete_signs_query(self, transport, session):
        await transport.delete("/fapi/v1/order", "symbol=BTCUSDT&orderId=1")

        method, url, body, _ = sent(session)
        expected = sign_form("symbol=BTCUSDT&orderId=1", "test_secret", timestamp=TIMESTAMP)
        assert method == "DELETE"
        assert url.endswith(f"?{expected}")
        assert body is None

    @pytest.mark.asyncio
    async def test_post_unsigned(self, transport, session):
        await transport.post_unsigned("/fapi/v1/listenKey")

        method, url, body, headers = sent(session)
        assert method == "POST"
        assert "signature" not in url
        assert body is None
        assert headers["X-MBX-APIKEY"] == "test_key"

    @pytest.mark.asyncio
    async def test_put_unsigned_with_form(self, transport, session):
        await transport.put_unsigned("/api/v3/userDataStream", "listenKey=abc")

        _, _, body, _ = sent(session)
        assert body == "listenKey=abc"

    @pytest.mark.asyncio
    async def test_query_not_reencoded(self, transport, session):
        form = build_form([("symbol", "BTCUSDT"), ("newClientOrderId", "a b@c")])
        await transport.delete("/fapi/v1/order", form)

        _, url, _, _ = sent(session)
        assert "newClientOrderId=a%20b%40c&" in url

    @pytest.mark.asyncio
    async def test_error_status_returned_raw(self, credentials):
        session = make_session(400, '{"code":-2011,"msg":"Unknown order sent."}')
        transport = RestTransport(BASE_URL, credentials=credentials, session=session)

        response = await transport.get("/fapi/v1/order")
        assert response.status == 400
        assert not response.ok

    @pytest.mark.asyncio
    async def test_client_error_propagates(self, transport, session):
        session.request.side_effect = aiohttp.ClientConnectionError("refused")

        with pytest.raises(aiohttp.ClientConnectionError):
            await transport.get("/fapi/v1/time")

    @pytest.mark.asyncio
    async def test_signed_call_without_credentials(self, session):
        transport = RestTransport(BASE_URL, session=session)

        with pytest.raises(MissingCredentialsError):
            await transport.post("/fapi/v1/order", "symbol=BTCUSDT")
        session.request.assert_not_called()


# =============================================================================
# Session Management Tests
# =============================================================================

class TestSession:
    """Tests for session ownership."""

    @pytest.mark.asyncio
    async def test_borrowed_session_not_closed(self, transport, session):
        await transport.close()
        session.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_owned_session_closed(self):
        transport = RestTransport(BASE_URL)
        await transport.connect()
        owned = transport._session
        assert owned is not None

        await transport.close()
        assert owned.closed
        assert transport._session is None
