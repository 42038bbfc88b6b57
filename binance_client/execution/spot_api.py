"""Binance Spot REST client."""

from typing import List

from loguru import logger

from binance_client.data.models import (
    CancelOrder,
    CancelOrderResponse,
    ExchangeInfo,
    ListenKeyResponse,
    OrderRequest,
    SpotAccount,
    SpotOrder,
    TickerPrice,
    build_form,
)
from binance_client.execution.client_base import BaseMarketClient, list_of
from binance_client.execution.markets import Market


class SpotClient(BaseMarketClient):
    """Async client for the Binance Spot API."""

    market = Market.SPOT

    async def get_exchange_info(self) -> ExchangeInfo:
        response = await self.transport.get("/api/v3/exchangeInfo")
        return self.decode_response(response, ExchangeInfo.from_binance)

    async def get_ticker_price(self) -> List[TickerPrice]:
        """Latest price for every symbol."""
        response = await self.transport.get("/api/v3/ticker/price")
        return self.decode_response(response, list_of(TickerPrice.from_binance))

    async def get_account(self) -> SpotAccount:
        response = await self.transport.authenticated_get("/api/v3/account")
        return self.decode_response(response, SpotAccount.from_binance)

    async def post_order(self, order: OrderRequest) -> SpotOrder:
        logger.info(f"Placing spot order: {order.side.value} {order.symbol} ({order.order_type.value})")
        response = await self.transport.post("/api/v3/order", order.to_form())
        return self.decode_response(response, SpotOrder.from_binance)

    async def cancel_order(self, request: CancelOrder) -> CancelOrderResponse:
        response = await self.transport.delete("/api/v3/order", request.to_form())
        return self.decode_response(response, CancelOrderResponse.from_binance)

    async def post_listen_key(self) -> ListenKeyResponse:
        response = await self.transport.post_unsigned("/api/v3/userDataStream")
        return self.decode_response(response, ListenKeyResponse.from_binance)

    async def put_listen_key(self, listen_key: str) -> dict:
        """Keep a spot listen key alive; the exchange answers with ``{}``."""
        response = await self.transport.put_unsigned(
            "/api/v3/userDataStream", build_form([("listenKey", listen_key)])
        )
        return self.decode_response(response)
