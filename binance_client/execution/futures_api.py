"""
Binance USD-M Futures REST client.
"""

from typing import List, Optional

from loguru import logger

from binance_client.data.models import (
    BookTicker,
    CancelOrder,
    ExchangeInfo,
    FuturesOrder,
    Kline,
    ListenKeyResponse,
    NewOrder,
    PositionEntry,
    build_form,
)
from binance_client.execution.client_base import BaseMarketClient, list_of
from binance_client.execution.markets import Market


class FuturesClient(BaseMarketClient):
    """
    Async client for the Binance USD-M Futures API.

    Handles:
    - Market data (exchange info, klines, book ticker)
    - Orders (new, cancel, open orders)
    - Positions
    - User data stream listen keys
    """

    market = Market.FUTURES

    # =========================================================================
    # Market Data
    # =========================================================================

    async def get_exchange_info(self) -> ExchangeInfo:
        response = await self.transport.get("/fapi/v1/exchangeInfo")
        return self.decode_response(response, ExchangeInfo.from_binance)

    async def get_klines(
        self,
        symbol: str,
        interval: str,
        limit: Optional[int] = None,
    ) -> List[Kline]:
        query = build_form([("symbol", symbol), ("interval", str(interval)), ("limit", limit)])
        response = await self.transport.get("/fapi/v1/klines", query)
        return self.decode_response(response, list_of(Kline.from_binance))

    async def book_ticker(self, symbol: str) -> BookTicker:
        query = build_form([("symbol", symbol)])
        response = await self.transport.get("/fapi/v1/ticker/bookTicker", query)
        return self.decode_response(response, BookTicker.from_binance)

    # =========================================================================
    # Orders
    # =========================================================================

    async def get_open_orders(self, symbol: Optional[str] = None) -> List[FuturesOrder]:
        form = build_form([("symbol", symbol)])
        response = await self.transport.authenticated_get("/fapi/v1/openOrders", form)
        return self.decode_response(response, list_of(FuturesOrder.from_binance))

    async def post_new_order(self, order: NewOrder) -> FuturesOrder:
        """Place an order."""
        logger.info(
            f"Placing order: {order.side.value} {order.quantity} {order.symbol} "
            f"@ {order.price or 'MARKET'}"
        )
        response = await self.transport.post("/fapi/v1/order", order.to_form())
        return self.decode_response(response, FuturesOrder.from_binance)

    async def cancel_order(self, request: CancelOrder) -> FuturesOrder:
        """Cancel an order."""
        response = await self.transport.delete("/fapi/v1/order", request.to_form())
        return self.decode_response(response, FuturesOrder.from_binance)

    # =========================================================================
    # Positions
    # =========================================================================

    async def get_positions(self, symbol: Optional[str] = None) -> List[PositionEntry]:
        form = build_form([("symbol", symbol)])
        response = await self.transport.authenticated_get("/fapi/v2/positionRisk", form)
        return self.decode_response(response, list_of(PositionEntry.from_binance))

    # =========================================================================
    # User Data Stream
    # =========================================================================

    async def post_listen_key(self) -> ListenKeyResponse:
        response = await self.transport.post_unsigned("/fapi/v1/listenKey")
        return self.decode_response(response, ListenKeyResponse.from_binance)

    async def put_listen_key(self) -> ListenKeyResponse:
        """Extend the current listen key's validity."""
        response = await self.transport.put("/fapi/v1/listenKey")
        return self.decode_response(response, ListenKeyResponse.from_binance)
