"""Request/response models, stream events and the WebSocket connector."""

from binance_client.data.models import (
    Side,
    OrderType,
    TimeInForce,
    PositionSide,
    NewOrder,
    CancelOrder,
    OrderRequest,
    build_form,
)
from binance_client.data.streams import Interval
from binance_client.data.events import (
    EventKind,
    StreamEvent,
    UnknownEvent,
    ParseErrorEvent,
    RawFrameEvent,
    PingEvent,
    MarketEvent,
    KlineEvent,
    AggTradeEvent,
    TradeEvent,
    LiquidationEvent,
    TickerEvent,
    MarkPriceEvent,
    DepthUpdateEvent,
    OrderTradeUpdateEvent,
    AccountUpdateEvent,
    ListenKeyExpiredEvent,
    EventDecoder,
)
from binance_client.data.websocket import BinanceWebSocket, create_websocket_from_config

__all__ = [
    # Enums
    "Side",
    "OrderType",
    "TimeInForce",
    "PositionSide",
    "Interval",
    # Requests
    "NewOrder",
    "CancelOrder",
    "OrderRequest",
    "build_form",
    # Events
    "EventKind",
    "StreamEvent",
    "UnknownEvent",
    "ParseErrorEvent",
    "RawFrameEvent",
    "PingEvent",
    "MarketEvent",
    "KlineEvent",
    "AggTradeEvent",
    "TradeEvent",
    "LiquidationEvent",
    "TickerEvent",
    "MarkPriceEvent",
    "DepthUpdateEvent",
    "OrderTradeUpdateEvent",
    "AccountUpdateEvent",
    "ListenKeyExpiredEvent",
    "EventDecoder",
    # Services
    "BinanceWebSocket",
    "create_websocket_from_config",
]
