"""
Stream events and the event decoder.

Every inbound text frame decodes to exactly one StreamEvent:
- a typed market/user-data event chosen by the ``e`` discriminator
- UnknownEvent for well-formed JSON with no known discriminator
- ParseErrorEvent for invalid JSON or a payload that does not fit its type

Combined-stream envelopes (``{"stream": ..., "data": {...}}``) are
unwrapped before dispatch; the channel name is kept on the event.
"""

import json
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Type

from aiohttp import WSMessage, WSMsgType
from loguru import logger

from binance_client.data.models import Side, to_decimal, to_opt_decimal, unmapped
from binance_client.execution.errors import UnexpectedFrameError


class EventKind(Enum):
    """All stream event kinds."""

    # Market data
    KLINE = "kline"
    AGG_TRADE = "aggTrade"
    TRADE = "trade"
    LIQUIDATION = "forceOrder"
    TICKER = "24hrTicker"
    MARK_PRICE = "markPriceUpdate"
    DEPTH_UPDATE = "depthUpdate"

    # User data
    ORDER_TRADE_UPDATE = "ORDER_TRADE_UPDATE"
    ACCOUNT_UPDATE = "ACCOUNT_UPDATE"
    LISTEN_KEY_EXPIRED = "listenKeyExpired"

    # Fallbacks
    UNKNOWN = "unknown"
    PARSE_ERROR = "parse_error"
    RAW_FRAME = "raw_frame"
    PING = "ping"


class StreamEvent:
    """Base class for everything the decoder returns."""

    kind: ClassVar[EventKind]


# =============================================================================
# Fallback Events
# =============================================================================

@dataclass(frozen=True)
class UnknownEvent(StreamEvent):
    """Valid JSON without a known discriminator (acks, new event kinds)."""
    kind: ClassVar[EventKind] = EventKind.UNKNOWN
    text: str


@dataclass(frozen=True)
class ParseErrorEvent(StreamEvent):
    """Text that could not be decoded; the connection stays up."""
    kind: ClassVar[EventKind] = EventKind.PARSE_ERROR
    error: str
    text: str


@dataclass(frozen=True)
class RawFrameEvent(StreamEvent):
    """Undecoded non-text frame (non-strict decoders only)."""
    kind: ClassVar[EventKind] = EventKind.RAW_FRAME
    message: WSMessage


@dataclass(frozen=True)
class PingEvent(StreamEvent):
    """Server ping. Already answered by the connection; informational."""
    kind: ClassVar[EventKind] = EventKind.PING
    payload: bytes


# =============================================================================
# Market Events
# =============================================================================

@dataclass(frozen=True)
class MarketEvent(StreamEvent):
    """
    Typed event decoded from a JSON object.

    ``stream`` is the combined-stream channel the event arrived on (None
    for single-stream connections) and does not take part in equality.
    ``other`` holds top-level fields the type does not map.
    """
    event_type: str
    event_time: int
    stream: Optional[str] = field(default=None, compare=False, kw_only=True)
    other: Dict[str, Any] = field(default_factory=dict, kw_only=True)

    # Top-level keys consumed by from_binance, used to build ``other``
    mapped_keys: ClassVar[Tuple[str, ...]] = ()

    @classmethod
    def from_binance(cls, data: dict, stream: Optional[str] = None) -> "MarketEvent":
        raise NotImplementedError

    @classmethod
    def _common(cls, data: dict, stream: Optional[str]) -> Dict[str, Any]:
        return {
            "event_type": data["e"],
            "event_time": int(data["E"]),
            "stream": stream,
            "other": unmapped(data, ("e", "E") + cls.mapped_keys),
        }


@dataclass(frozen=True)
class KlineData:
    """Candle carried by a kline event."""
    start_time: int
    close_time: int
    symbol: str
    interval: str
    open: Decimal
    close: Decimal
    high: Decimal
    low: Decimal
    volume: Decimal
    quote_volume: Optional[Decimal]
    trade_count: Optional[int]
    closed: bool

    @classmethod
    def from_binance(cls, data: dict) -> "KlineData":
        return cls(
            start_time=int(data["t"]),
            close_time=int(data["T"]),
            symbol=data["s"],
            interval=data["i"],
            open=to_decimal(data["o"]),
            close=to_decimal(data["c"]),
            high=to_decimal(data["h"]),
            low=to_decimal(data["l"]),
            volume=to_decimal(data["v"]),
            quote_volume=to_opt_decimal(data.get("q")),
            trade_count=data.get("n"),
            closed=bool(data["x"]),
        )


@dataclass(frozen=True)
class KlineEvent(MarketEvent):
    kind: ClassVar[EventKind] = EventKind.KLINE
    mapped_keys: ClassVar[Tuple[str, ...]] = ("s", "k")
    symbol: str
    kline: KlineData

    @classmethod
    def from_binance(cls, data: dict, stream: Optional[str] = None) -> "KlineEvent":
        return cls(
            symbol=data["s"],
            kline=KlineData.from_binance(data["k"]),
            **cls._common(data, stream),
        )


@dataclass(frozen=True)
class AggTradeEvent(MarketEvent):
    """Aggregated trade."""
    kind: ClassVar[EventKind] = EventKind.AGG_TRADE
    mapped_keys: ClassVar[Tuple[str, ...]] = ("s", "a", "p", "q", "f", "l", "T", "m")
    symbol: str
    agg_trade_id: int
    price: Decimal
    quantity: Decimal
    first_trade_id: int
    last_trade_id: int
    trade_time: int
    buyer_maker: bool

    @property
    def side(self) -> Side:
        """Infer trade side: buyer maker = sell, seller maker = buy."""
        return Side.SELL if self.buyer_maker else Side.BUY

    @property
    def value(self) -> Decimal:
        """Trade value in quote currency."""
        return self.price * self.quantity

    @classmethod
    def from_binance(cls, data: dict, stream: Optional[str] = None) -> "AggTradeEvent":
        return cls(
            symbol=data["s"],
            agg_trade_id=int(data["a"]),
            price=to_decimal(data["p"]),
            quantity=to_decimal(data["q"]),
            first_trade_id=int(data["f"]),
            last_trade_id=int(data["l"]),
            trade_time=int(data["T"]),
            buyer_maker=bool(data["m"]),
            **cls._common(data, stream),
        )


@dataclass(frozen=True)
class TradeEvent(MarketEvent):
    """Raw (non-aggregated) spot trade."""
    kind: ClassVar[EventKind] = EventKind.TRADE
    mapped_keys: ClassVar[Tuple[str, ...]] = ("s", "t", "p", "q", "T", "m")
    symbol: str
    trade_id: int
    price: Decimal
    quantity: Decimal
    trade_time: int
    buyer_maker: bool

    @property
    def side(self) -> Side:
        return Side.SELL if self.buyer_maker else Side.BUY

    @classmethod
    def from_binance(cls, data: dict, stream: Optional[str] = None) -> "TradeEvent":
        return cls(
            symbol=data["s"],
            trade_id=int(data["t"]),
            price=to_decimal(data["p"]),
            quantity=to_decimal(data["q"]),
            trade_time=int(data["T"]),
            buyer_maker=bool(data["m"]),
            **cls._common(data, stream),
        )


@dataclass(frozen=True)
class LiquidationOrder:
    symbol: str
    side: str
    order_type: str
    time_in_force: str
    quantity: Decimal
    price: Decimal
    avg_price: Decimal
    status: str
    last_filled_qty: Decimal
    filled_qty: Decimal
    trade_time: int

    @classmethod
    def from_binance(cls, data: dict) -> "LiquidationOrder":
        return cls(
            symbol=data["s"],
            side=data["S"],
            order_type=data["o"],
            time_in_force=data["f"],
            quantity=to_decimal(data["q"]),
            price=to_decimal(data["p"]),
            avg_price=to_decimal(data["ap"]),
            status=data["X"],
            last_filled_qty=to_decimal(data["l"]),
            filled_qty=to_decimal(data["z"]),
            trade_time=int(data["T"]),
        )


@dataclass(frozen=True)
class LiquidationEvent(MarketEvent):
    """Forced liquidation order."""
    kind: ClassVar[EventKind] = EventKind.LIQUIDATION
    mapped_keys: ClassVar[Tuple[str, ...]] = ("o",)
    order: LiquidationOrder

    @classmethod
    def from_binance(cls, data: dict, stream: Optional[str] = None) -> "LiquidationEvent":
        return cls(order=LiquidationOrder.from_binance(data["o"]), **cls._common(data, stream))


@dataclass(frozen=True)
class TickerEvent(MarketEvent):
    """Rolling 24h ticker."""
    kind: ClassVar[EventKind] = EventKind.TICKER
    mapped_keys: ClassVar[Tuple[str, ...]] = (
        "s", "p", "P", "w", "c", "Q", "o", "h", "l", "v", "q", "O", "C", "F", "L", "n",
    )
    symbol: str
    price_change: Decimal
    price_change_percent: Decimal
    weighted_avg_price: Decimal
    last_price: Decimal
    last_qty: Decimal
    open_price: Decimal
    high_price: Decimal
    low_price: Decimal
    volume: Decimal
    quote_volume: Decimal
    open_time: int
    close_time: int
    first_trade_id: int
    last_trade_id: int
    trade_count: int

    @classmethod
    def from_binance(cls, data: dict, stream: Optional[str] = None) -> "TickerEvent":
        return cls(
            symbol=data["s"],
            price_change=to_decimal(data["p"]),
            price_change_percent=to_decimal(data["P"]),
            weighted_avg_price=to_decimal(data["w"]),
            last_price=to_decimal(data["c"]),
            last_qty=to_decimal(data["Q"]),
            open_price=to_decimal(data["o"]),
            high_price=to_decimal(data["h"]),
            low_price=to_decimal(data["l"]),
            volume=to_decimal(data["v"]),
            quote_volume=to_decimal(data["q"]),
            open_time=int(data["O"]),
            close_time=int(data["C"]),
            first_trade_id=int(data["F"]),
            last_trade_id=int(data["L"]),
            trade_count=int(data["n"]),
            **cls._common(data, stream),
        )


@dataclass(frozen=True)
class MarkPriceEvent(MarketEvent):
    """Mark price and funding rate."""
    kind: ClassVar[EventKind] = EventKind.MARK_PRICE
    mapped_keys: ClassVar[Tuple[str, ...]] = ("s", "p", "i", "P", "r", "T")
    symbol: str
    mark_price: Decimal
    index_price: Decimal
    estimated_settle_price: Decimal
    funding_rate: Decimal
    next_funding_time: int

    @classmethod
    def from_binance(cls, data: dict, stream: Optional[str] = None) -> "MarkPriceEvent":
        return cls(
            symbol=data["s"],
            mark_price=to_decimal(data["p"]),
            index_price=to_decimal(data["i"]),
            estimated_settle_price=to_decimal(data.get("P", data["p"])),
            funding_rate=to_decimal(data["r"]),
            next_funding_time=int(data["T"]),
            **cls._common(data, stream),
        )


PriceLevel = Tuple[Decimal, Decimal]


def _levels(rows: list) -> List[PriceLevel]:
    return [(to_decimal(price), to_decimal(qty)) for price, qty in rows]


@dataclass(frozen=True)
class DepthUpdateEvent(MarketEvent):
    """Incremental order book update."""
    kind: ClassVar[EventKind] = EventKind.DEPTH_UPDATE
    mapped_keys: ClassVar[Tuple[str, ...]] = ("s", "U", "u", "b", "a")
    symbol: str
    first_update_id: int
    final_update_id: int
    bids: List[PriceLevel]
    asks: List[PriceLevel]

    @classmethod
    def from_binance(cls, data: dict, stream: Optional[str] = None) -> "DepthUpdateEvent":
        return cls(
            symbol=data["s"],
            first_update_id=int(data["U"]),
            final_update_id=int(data["u"]),
            bids=_levels(data["b"]),
            asks=_levels(data["a"]),
            **cls._common(data, stream),
        )


# =============================================================================
# User Data Events
# =============================================================================

@dataclass(frozen=True)
class OrderTradeUpdate:
    """Order state carried by ORDER_TRADE_UPDATE."""
    symbol: str
    client_order_id: str
    side: str
    order_type: str
    time_in_force: str
    orig_qty: Decimal
    orig_price: Decimal
    avg_price: Decimal
    stop_price: Decimal
    execution_type: str
    order_status: str
    order_id: int
    last_fill_qty: Decimal
    cum_fill_qty: Decimal
    last_fill_price: Decimal
    commission_asset: Optional[str]
    commission: Optional[Decimal]
    trade_time: int
    trade_id: int
    bids_notional: Optional[Decimal]
    asks_notional: Optional[Decimal]
    is_maker: bool
    is_reduce_only: bool
    working_type: str
    orig_order_type: str
    position_side: str
    is_close_all: bool
    activation_price: Optional[Decimal]
    callback_rate: Optional[Decimal]
    realized_profit: Decimal

    @property
    def is_filled(self) -> bool:
        return self.order_status == "FILLED"

    @classmethod
    def from_binance(cls, data: dict) -> "OrderTradeUpdate":
        return cls(
            symbol=data["s"],
            client_order_id=data["c"],
            side=data["S"],
            order_type=data["o"],
            time_in_force=data["f"],
            orig_qty=to_decimal(data["q"]),
            orig_price=to_decimal(data["p"]),
            avg_price=to_decimal(data["ap"]),
            stop_price=to_decimal(data["sp"]),
            execution_type=data["x"],
            order_status=data["X"],
            order_id=int(data["i"]),
            last_fill_qty=to_decimal(data["l"]),
            cum_fill_qty=to_decimal(data["z"]),
            last_fill_price=to_decimal(data["L"]),
            commission_asset=data.get("N"),
            commission=to_opt_decimal(data.get("n")),
            trade_time=int(data["T"]),
            trade_id=int(data["t"]),
            bids_notional=to_opt_decimal(data.get("b")),
            asks_notional=to_opt_decimal(data.get("a")),
            is_maker=bool(data["m"]),
            is_reduce_only=bool(data["R"]),
            working_type=data["wt"],
            orig_order_type=data["ot"],
            position_side=data["ps"],
            is_close_all=bool(data["cp"]),
            activation_price=to_opt_decimal(data.get("AP")),
            callback_rate=to_opt_decimal(data.get("cr")),
            realized_profit=to_decimal(data["rp"]),
        )


@dataclass(frozen=True)
class OrderTradeUpdateEvent(MarketEvent):
    kind: ClassVar[EventKind] = EventKind.ORDER_TRADE_UPDATE
    mapped_keys: ClassVar[Tuple[str, ...]] = ("T", "o")
    transaction_time: int
    update: OrderTradeUpdate

    @classmethod
    def from_binance(cls, data: dict, stream: Optional[str] = None) -> "OrderTradeUpdateEvent":
        return cls(
            transaction_time=int(data["T"]),
            update=OrderTradeUpdate.from_binance(data["o"]),
            **cls._common(data, stream),
        )


@dataclass(frozen=True)
class AccountBalance:
    asset: str
    wallet_balance: Decimal
    cross_wallet_balance: Decimal

    @classmethod
    def from_binance(cls, data: dict) -> "AccountBalance":
        return cls(
            asset=data["a"],
            wallet_balance=to_decimal(data["wb"]),
            cross_wallet_balance=to_decimal(data["cw"]),
        )


@dataclass(frozen=True)
class AccountPosition:
    symbol: str
    position_amount: Decimal
    entry_price: Decimal
    accumulated_realized: Decimal
    unrealized_profit: Decimal
    margin_type: str
    isolated_wallet: Decimal
    position_side: str

    @classmethod
    def from_binance(cls, data: dict) -> "AccountPosition":
        return cls(
            symbol=data["s"],
            position_amount=to_decimal(data["pa"]),
            entry_price=to_decimal(data["ep"]),
            accumulated_realized=to_decimal(data["cr"]),
            unrealized_profit=to_decimal(data["up"]),
            margin_type=data["mt"],
            isolated_wallet=to_decimal(data["iw"]),
            position_side=data["ps"],
        )


@dataclass(frozen=True)
class AccountUpdateEvent(MarketEvent):
    """Balance and position changes (futures user data stream)."""
    kind: ClassVar[EventKind] = EventKind.ACCOUNT_UPDATE
    mapped_keys: ClassVar[Tuple[str, ...]] = ("T", "a")
    transaction_time: int
    reason: str
    balances: List[AccountBalance]
    positions: List[AccountPosition]

    @classmethod
    def from_binance(cls, data: dict, stream: Optional[str] = None) -> "AccountUpdateEvent":
        account = data["a"]
        return cls(
            transaction_time=int(data["T"]),
            reason=account["m"],
            balances=[AccountBalance.from_binance(b) for b in account["B"]],
            positions=[AccountPosition.from_binance(p) for p in account["P"]],
            **cls._common(data, stream),
        )


@dataclass(frozen=True)
class ListenKeyExpiredEvent(MarketEvent):
    """The user data stream's listen key expired; a new one is needed."""
    kind: ClassVar[EventKind] = EventKind.LISTEN_KEY_EXPIRED

    @classmethod
    def from_binance(cls, data: dict, stream: Optional[str] = None) -> "ListenKeyExpiredEvent":
        return cls(**cls._common(data, stream))


EVENT_TYPES: Dict[str, Type[MarketEvent]] = {
    cls.kind.value: cls
    for cls in (
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
    )
}

_DECODE_ERRORS = (LookupError, ValueError, TypeError, AttributeError, InvalidOperation)


# =============================================================================
# Decoder
# =============================================================================

def _is_envelope(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and isinstance(value.get("stream"), str)
        and isinstance(value.get("data"), dict)
        and isinstance(value["data"].get("e"), str)
    )


class EventDecoder:
    """
    Stateless frame-to-event decoder.

    Args:
        strict: Raise UnexpectedFrameError for frames other than text and
            ping instead of returning RawFrameEvent
    """

    def __init__(self, strict: bool = True):
        self.strict = strict

    def decode_message(self, message: WSMessage) -> StreamEvent:
        """Decode one websocket frame."""
        if message.type == WSMsgType.PING:
            return PingEvent(payload=message.data)

        if message.type == WSMsgType.TEXT:
            return self.decode_text(message.data)

        if self.strict:
            raise UnexpectedFrameError(message.type)
        return RawFrameEvent(message=message)

    def decode_text(self, text: str) -> StreamEvent:
        """Decode a text frame."""
        try:
            value = json.loads(text)
        except (ValueError, RecursionError) as e:
            logger.warning(f"Failed to parse message: {e}")
            return ParseErrorEvent(error=str(e), text=text)

        return self.decode_value(value, text)

    def decode_value(self, value: Any, text: str) -> StreamEvent:
        """Classify already-parsed JSON; ``text`` is the original frame."""
        stream = None
        if _is_envelope(value):
            stream = value["stream"]
            value = value["data"]

        event_type = value.get("e") if isinstance(value, dict) else None
        event_cls = EVENT_TYPES.get(event_type) if isinstance(event_type, str) else None

        if event_cls is None:
            logger.debug(f"Unknown event type: {event_type}")
            return UnknownEvent(text=text)

        try:
            return event_cls.from_binance(value, stream)
        except _DECODE_ERRORS as e:
            logger.warning(f"Failed to decode {event_type} event: {e!r}")
            return ParseErrorEvent(error=f"{event_type}: {e!r}", text=text)
