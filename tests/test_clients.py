"""
Unit tests for the spot and futures REST clients.
"""

import json
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from binance_client.data.models import (
    CancelOrder,
    ExchangeInfo,
    FuturesOrder,
    Kline,
    NewOrder,
    OrderRequest,
    OrderType,
    PositionEntry,
    Side,
    SpotAccount,
    TickerPrice,
)
from binance_client.execution.client_factory import create_client
from binance_client.execution.errors import APIError, DecodeError
from binance_client.execution.futures_api import FuturesClient
from binance_client.execution.markets import Market
from binance_client.execution.signing import Credentials
from binance_client.execution.spot_api import SpotClient
from binance_client.execution.transport import RawResponse


# =============================================================================
# Test Fixtures
# =============================================================================

def ok(payload) -> RawResponse:
    return RawResponse(200, json.dumps(payload))


def mock_transport(client, response: RawResponse):
    """Replace every transport verb with an AsyncMock returning response."""
    for verb in ("get", "authenticated_get", "post", "put", "delete", "post_unsigned", "put_unsigned"):
        setattr(client.transport, verb, AsyncMock(return_value=response))
    return client


@pytest.fixture
def credentials():
    return Credentials("test_key", "test_secret")


@pytest.fixture
def futures(credentials):
    return FuturesClient(credentials, testnet=True)


@pytest.fixture
def spot(credentials):
    return SpotClient(credentials, testnet=True)


@pytest.fixture
def sample_futures_order():
    return {
        "orderId": 22542179,
        "symbol": "BTCUSDT",
        "status": "NEW",
        "clientOrderId": "testOrder",
        "price": "30000",
        "avgPrice": "0.00000",
        "origQty": "0.001",
        "executedQty": "0",
        "cumQuote": "0",
        "timeInForce": "GTC",
        "type": "LIMIT",
        "side": "BUY",
        "positionSide": "BOTH",
        "reduceOnly": False,
        "closePosition": False,
        "stopPrice": "0",
        "origType": "LIMIT",
        "updateTime": 1566818724722,
        "workingType": "CONTRACT_PRICE",
    }


@pytest.fixture
def sample_position():
    return {
        "symbol": "BTCUSDT",
        "positionAmt": "0.001",
        "entryPrice": "30000.0",
        "markPrice": "30100.0",
        "unRealizedProfit": "0.1",
        "liquidationPrice": "0",
        "leverage": "10",
        "marginType": "cross",
        "isolatedMargin": "0.00000000",
        "isAutoAddMargin": "false",
        "positionSide": "BOTH",
        "maxNotionalValue": "250000",
        "notional": "30.1",
    }


# =============================================================================
# Construction Tests
# =============================================================================

class TestConstruction:
    """Tests for client construction."""

    def test_futures_urls(self, credentials):
        assert FuturesClient(credentials).transport.base_url == "https://fapi.binance.com"
        assert FuturesClient(credentials, testnet=True).transport.base_url == (
            "https://testnet.binancefuture.com"
        )

    def test_spot_urls(self):
        assert SpotClient().transport.base_url == "https://api.binance.com"
        assert SpotClient(testnet=True).transport.base_url == "https://testnet.binance.vision"

    def test_has_credentials(self, futures):
        assert futures.has_credentials
        assert not FuturesClient().has_credentials

    def test_recv_window_forwarded(self, credentials):
        assert FuturesClient(credentials, recv_window=5000).transport.recv_window == 5000

    def test_create_client(self, credentials):
        assert isinstance(create_client("futures", credentials), FuturesClient)
        assert isinstance(create_client(Market.SPOT), SpotClient)
        assert isinstance(create_client("SPOT"), SpotClient)

    def test_create_client_unknown_market(self):
        with pytest.raises(ValueError, match="Unknown market"):
            create_client("margin")


# =============================================================================
# FuturesClient Tests
# =============================================================================

class TestFuturesClient:
    """Tests for FuturesClient endpoints."""

    @pytest.mark.asyncio
    async def test_get_open_orders(self, futures, sample_futures_order):
        mock_transport(futures, ok([sample_futures_order]))

        orders = await futures.get_open_orders("BTCUSDT")

        futures.transport.authenticated_get.assert_awaited_once_with(
            "/fapi/v1/openOrders", "symbol=BTCUSDT"
        )
        assert len(orders) == 1
        order = orders[0]
        assert isinstance(order, FuturesOrder)
        assert order.order_id == 22542179
        assert order.price == Decimal("30000")
        assert order.is_open
        assert order.other == {"workingType": "CONTRACT_PRICE"}

    @pytest.mark.asyncio
    async def test_get_open_orders_all_symbols(self, futures):
        mock_transport(futures, ok([]))

        assert await futures.get_open_orders() == []
        futures.transport.authenticated_get.assert_awaited_once_with("/fapi/v1/openOrders", "")

    @pytest.mark.asyncio
    async def test_post_new_order(self, futures, sample_futures_order):
        mock_transport(futures, ok(sample_futures_order))
        order = NewOrder.limit("btcusdt", Side.BUY, Decimal("30000"), Decimal("0.001"))

        result = await futures.post_new_order(order)

        futures.transport.post.assert_awaited_once_with(
            "/fapi/v1/order",
            "symbol=BTCUSDT&side=BUY&type=LIMIT&quantity=0.001&price=30000&timeInForce=GTC",
        )
        assert result.client_order_id == "testOrder"

    @pytest.mark.asyncio
    async def test_cancel_order(self, futures, sample_futures_order):
        sample_futures_order["status"] = "CANCELED"
        mock_transport(futures, ok(sample_futures_order))

        result = await futures.cancel_order(CancelOrder.by_order_id("BTCUSDT", 22542179))

        futures.transport.delete.assert_awaited_once_with(
            "/fapi/v1/order", "symbol=BTCUSDT&orderId=22542179"
        )
        assert not result.is_open

    @pytest.mark.asyncio
    async def test_cancel_unknown_order(self, futures):
        mock_transport(futures, RawResponse(400, '{"code":-2011,"msg":"Unknown order sent."}'))

        with pytest.raises(APIError) as exc_info:
            await futures.cancel_order(CancelOrder.by_client_order_id("BTCUSDT", "missing"))

        assert exc_info.value.code == -2011

    @pytest.mark.asyncio
    async def test_get_positions(self, futures, sample_position):
        mock_transport(futures, ok([sample_position]))

        positions = await futures.get_positions()

        futures.transport.authenticated_get.assert_awaited_once_with("/fapi/v2/positionRisk", "")
        position = positions[0]
        assert isinstance(position, PositionEntry)
        assert position.leverage == 10
        assert position.auto_add_margin is False
        assert position.id == ("BTCUSDT", "BOTH")
        assert position.other == {"notional": "30.1"}

    @pytest.mark.asyncio
    async def test_get_klines(self, futures):
        row = [1499040000000, "0.01634790", "0.80000000", "0.01575800", "0.01577100",
               "148976.11427815", 1499644799999, "2434.19055334", 308,
               "1756.87402397", "28.46694368", "0"]
        mock_transport(futures, ok([row]))

        klines = await futures.get_klines("BTCUSDT", "1m", limit=1)

        futures.transport.get.assert_awaited_once_with(
            "/fapi/v1/klines", "symbol=BTCUSDT&interval=1m&limit=1"
        )
        assert isinstance(klines[0], Kline)
        assert klines[0].trade_count == 308

    @pytest.mark.asyncio
    async def test_book_ticker(self, futures):
        mock_transport(futures, ok({
            "symbol": "BTCUSDT", "bidPrice": "4.00000000", "bidQty": "431.00000000",
            "askPrice": "4.00000200", "askQty": "9.00000000", "time": 1589437530011,
        }))

        ticker = await futures.book_ticker("BTCUSDT")
        assert ticker.ask_price == Decimal("4.000002")

    @pytest.mark.asyncio
    async def test_get_exchange_info(self, futures):
        mock_transport(futures, ok({
            "timezone": "UTC",
            "symbols": [{
                "symbol": "BTCUSDT", "status": "TRADING", "baseAsset": "BTC",
                "quoteAsset": "USDT", "filters": [{"filterType": "PRICE_FILTER"}],
            }],
        }))

        info = await futures.get_exchange_info()
        assert isinstance(info, ExchangeInfo)
        assert info.symbol("BTCUSDT").is_trading
        assert info.other == {"timezone": "UTC"}

    @pytest.mark.asyncio
    async def test_listen_keys(self, futures):
        mock_transport(futures, ok({"listenKey": "pqia91ma19a5s61cv6a81va65sdf19v8a65a1"}))

        created = await futures.post_listen_key()
        extended = await futures.put_listen_key()

        futures.transport.post_unsigned.assert_awaited_once_with("/fapi/v1/listenKey")
        futures.transport.put.assert_awaited_once_with("/fapi/v1/listenKey")
        assert created.listen_key == extended.listen_key

    @pytest.mark.asyncio
    async def test_unexpected_body(self, futures):
        mock_transport(futures, ok({"unexpected": True}))

        with pytest.raises(DecodeError):
            await futures.post_listen_key()


# =============================================================================
# SpotClient Tests
# =============================================================================

class TestSpotClient:
    """Tests for SpotClient endpoints."""

    @pytest.mark.asyncio
    async def test_get_ticker_price(self, spot):
        mock_transport(spot, ok([
            {"symbol": "LTCBTC", "price": "4.00000200"},
            {"symbol": "ETHBTC", "price": "0.07946600"},
        ]))

        prices = await spot.get_ticker_price()

        spot.transport.get.assert_awaited_once_with("/api/v3/ticker/price")
        assert prices[0] == TickerPrice("LTCBTC", Decimal("4.000002"))

    @pytest.mark.asyncio
    async def test_get_account(self, spot):
        mock_transport(spot, ok({
            "canTrade": True,
            "accountType": "SPOT",
            "balances": [{"asset": "BTC", "free": "1.5", "locked": "0.5"}],
        }))

        account = await spot.get_account()

        spot.transport.authenticated_get.assert_awaited_once_with("/api/v3/account")
        assert isinstance(account, SpotAccount)
        assert account.balance("BTC").total == Decimal("2.0")
        assert account.balance("ETH") is None
        assert account.other == {"accountType": "SPOT"}

    @pytest.mark.asyncio
    async def test_post_order(self, spot):
        mock_transport(spot, ok({
            "symbol": "BTCUSDT", "orderId": 28, "orderListId": -1,
            "clientOrderId": "6gCrw2kRUAF9CvJDGP16IP", "transactTime": 1507725176595,
            "price": "0.00000000", "origQty": "10.00000000", "executedQty": "10.00000000",
            "cummulativeQuoteQty": "10.00000000", "status": "FILLED", "timeInForce": "GTC",
            "type": "MARKET", "side": "SELL",
        }))
        order = OrderRequest("btcusdt", Side.SELL, OrderType.MARKET, quantity=Decimal("10"))

        result = await spot.post_order(order)

        spot.transport.post.assert_awaited_once_with(
            "/api/v3/order", "symbol=BTCUSDT&side=SELL&type=MARKET&quantity=10"
        )
        assert result.status == "FILLED"
        assert result.fills == []

    @pytest.mark.asyncio
    async def test_put_listen_key(self, spot):
        mock_transport(spot, ok({}))

        assert await spot.put_listen_key("abc") == {}
        spot.transport.put_unsigned.assert_awaited_once_with(
            "/api/v3/userDataStream", "listenKey=abc"
        )

    @pytest.mark.asyncio
    async def test_post_listen_key(self, spot):
        mock_transport(spot, ok({"listenKey": "abc"}))

        result = await spot.post_listen_key()
        spot.transport.post_unsigned.assert_awaited_once_with("/api/v3/userDataStream")
        assert result.listen_key == "abc"
