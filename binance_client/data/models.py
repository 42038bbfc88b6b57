"""
REST request and response models.

Responses are built with ``from_binance`` from the decoded JSON. Fields
the models do not map are kept in ``other`` so schema additions on the
exchange side are not lost.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import quote


class Side(Enum):
    """Order side."""
    BUY = "BUY"
    SELL = "SELL"

    @property
    def opposite(self) -> "Side":
        return Side.SELL if self == Side.BUY else Side.BUY


class OrderType(Enum):
    """Order type."""
    MARKET = "MARKET"
    LIMIT = "LIMIT"

    # Futures
    STOP = "STOP"
    STOP_MARKET = "STOP_MARKET"
    TAKE_PROFIT = "TAKE_PROFIT"
    TAKE_PROFIT_MARKET = "TAKE_PROFIT_MARKET"
    TRAILING_STOP_MARKET = "TRAILING_STOP_MARKET"


class TimeInForce(Enum):
    """Time in force for orders."""
    GTC = "GTC"  # Good Till Cancel
    IOC = "IOC"  # Immediate or Cancel
    FOK = "FOK"  # Fill or Kill
    GTX = "GTX"  # Post Only


class PositionSide(Enum):
    """Futures position side (hedge mode)."""
    BOTH = "BOTH"
    LONG = "LONG"
    SHORT = "SHORT"


# =============================================================================
# Helpers
# =============================================================================

def to_decimal(value: Any) -> Decimal:
    """Decimal from a Binance numeric string."""
    return Decimal(str(value))


def to_opt_decimal(value: Any) -> Optional[Decimal]:
    """Decimal, or None for a missing/empty value."""
    if value is None or value == "":
        return None
    return Decimal(str(value))


def unmapped(data: dict, known: Iterable[str]) -> Dict[str, Any]:
    """Fields of data that a model does not map."""
    known = set(known)
    return {k: v for k, v in data.items() if k not in known}


def _format_value(value: Any) -> str:
    """Render a form value the way the exchange expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def build_form(pairs: Iterable[Tuple[str, Any]]) -> str:
    """
    Join ordered key/value pairs into a form-encoded string.

    Pairs whose value is None are skipped; order is preserved.
    """
    return "&".join(
        f"{key}={quote(_format_value(value), safe='')}"
        for key, value in pairs
        if value is not None
    )


# =============================================================================
# Requests
# =============================================================================

@dataclass
class NewOrder:
    """
    Futures order request.

    Use the ``market``/``limit`` constructors for the common cases.
    """
    symbol: str
    side: Side
    order_type: OrderType
    position_side: Optional[PositionSide] = None
    quantity: Optional[Decimal] = None
    price: Optional[Decimal] = None
    time_in_force: Optional[TimeInForce] = None
    reduce_only: Optional[bool] = None
    stop_price: Optional[Decimal] = None
    client_order_id: Optional[str] = None
    close_position: Optional[bool] = None

    def __post_init__(self):
        self.symbol = self.symbol.upper()

    @classmethod
    def market(cls, symbol: str, side: Side, quantity: Decimal) -> "NewOrder":
        return cls(symbol, side, OrderType.MARKET, quantity=quantity)

    @classmethod
    def limit(
        cls,
        symbol: str,
        side: Side,
        price: Decimal,
        quantity: Decimal,
        time_in_force: TimeInForce = TimeInForce.GTC,
    ) -> "NewOrder":
        return cls(
            symbol,
            side,
            OrderType.LIMIT,
            quantity=quantity,
            price=price,
            time_in_force=time_in_force,
        )

    def with_client_order_id(self, client_order_id: str) -> "NewOrder":
        self.client_order_id = client_order_id
        return self

    def with_reduce_only(self) -> "NewOrder":
        self.reduce_only = True
        return self

    def with_post_only(self) -> "NewOrder":
        self.time_in_force = TimeInForce.GTX
        return self

    def to_form(self) -> str:
        return build_form([
            ("symbol", self.symbol),
            ("side", self.side),
            ("type", self.order_type),
            ("positionSide", self.position_side),
            ("quantity", self.quantity),
            ("price", self.price),
            ("timeInForce", self.time_in_force),
            ("reduceOnly", self.reduce_only),
            ("stopPrice", self.stop_price),
            ("newClientOrderId", self.client_order_id),
            ("closePosition", self.close_position),
        ])


@dataclass
class CancelOrder:
    """Cancel request by exchange order id or client order id (spot and futures)."""
    symbol: str
    order_id: Optional[int] = None
    client_order_id: Optional[str] = None

    def __post_init__(self):
        if self.order_id is None and self.client_order_id is None:
            raise ValueError("order_id or client_order_id required")

    @classmethod
    def by_order_id(cls, symbol: str, order_id: int) -> "CancelOrder":
        return cls(symbol, order_id=order_id)

    @classmethod
    def by_client_order_id(cls, symbol: str, client_order_id: str) -> "CancelOrder":
        return cls(symbol, client_order_id=client_order_id)

    def to_form(self) -> str:
        return build_form([
            ("symbol", self.symbol),
            ("orderId", self.order_id),
            ("origClientOrderId", self.client_order_id),
        ])


@dataclass
class OrderRequest:
    """Spot order request."""
    symbol: str
    side: Side
    order_type: OrderType
    quantity: Optional[Decimal] = None
    quote_order_qty: Optional[Decimal] = None
    price: Optional[Decimal] = None
    time_in_force: Optional[TimeInForce] = None

    def to_form(self) -> str:
        return build_form([
            ("symbol", self.symbol.upper()),
            ("side", self.side),
            ("type", self.order_type),
            ("quantity", self.quantity),
            ("quoteOrderQty", self.quote_order_qty),
            ("price", self.price),
            ("timeInForce", self.time_in_force),
        ])


# =============================================================================
# Responses
# =============================================================================

@dataclass
class ListenKeyResponse:
    listen_key: str

    @classmethod
    def from_binance(cls, data: dict) -> "ListenKeyResponse":
        return cls(listen_key=data["listenKey"])


@dataclass
class TickerPrice:
    symbol: str
    price: Decimal

    @classmethod
    def from_binance(cls, data: dict) -> "TickerPrice":
        return cls(symbol=data["symbol"], price=to_decimal(data["price"]))


@dataclass
class BookTicker:
    """Best bid/ask for a symbol."""
    symbol: str
    bid_price: Decimal
    bid_qty: Decimal
    ask_price: Decimal
    ask_qty: Decimal
    time: Optional[int] = None
    other: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_binance(cls, data: dict) -> "BookTicker":
        return cls(
            symbol=data["symbol"],
            bid_price=to_decimal(data["bidPrice"]),
            bid_qty=to_decimal(data["bidQty"]),
            ask_price=to_decimal(data["askPrice"]),
            ask_qty=to_decimal(data["askQty"]),
            time=data.get("time"),
            other=unmapped(data, ("symbol", "bidPrice", "bidQty", "askPrice", "askQty", "time")),
        )


@dataclass
class Kline:
    """
    Candle from the REST klines endpoint.

    Binance sends each kline as a positional array.
    """
    open_time: int
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal
    close_time: int
    quote_asset_volume: Decimal
    trade_count: int
    taker_buy_base_volume: Decimal
    taker_buy_quote_volume: Decimal

    @classmethod
    def from_binance(cls, data: list) -> "Kline":
        return cls(
            open_time=int(data[0]),
            open=to_decimal(data[1]),
            high=to_decimal(data[2]),
            low=to_decimal(data[3]),
            close=to_decimal(data[4]),
            volume=to_decimal(data[5]),
            close_time=int(data[6]),
            quote_asset_volume=to_decimal(data[7]),
            trade_count=int(data[8]),
            taker_buy_base_volume=to_decimal(data[9]),
            taker_buy_quote_volume=to_decimal(data[10]),
        )


_FUTURES_ORDER_FIELDS = (
    "orderId", "symbol", "status", "clientOrderId", "price", "avgPrice",
    "origQty", "executedQty", "cumQuote", "timeInForce", "type", "side",
    "positionSide", "reduceOnly", "closePosition", "stopPrice", "origType",
    "updateTime",
)


@dataclass
class FuturesOrder:
    """
    Futures order as returned by new order, cancel, and open orders.
    """
    order_id: int
    symbol: str
    status: str
    client_order_id: str
    price: Decimal
    avg_price: Decimal
    orig_qty: Decimal
    executed_qty: Decimal
    cum_quote: Decimal
    time_in_force: str
    order_type: str
    side: str
    position_side: str
    reduce_only: bool
    close_position: bool
    stop_price: Decimal
    orig_type: str
    update_time: int
    other: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_open(self) -> bool:
        return self.status in ("NEW", "PARTIALLY_FILLED")

    @classmethod
    def from_binance(cls, data: dict) -> "FuturesOrder":
        return cls(
            order_id=data["orderId"],
            symbol=data["symbol"],
            status=data["status"],
            client_order_id=data["clientOrderId"],
            price=to_decimal(data["price"]),
            avg_price=to_decimal(data["avgPrice"]),
            orig_qty=to_decimal(data["origQty"]),
            executed_qty=to_decimal(data["executedQty"]),
            cum_quote=to_decimal(data["cumQuote"]),
            time_in_force=data["timeInForce"],
            order_type=data["type"],
            side=data["side"],
            position_side=data["positionSide"],
            reduce_only=data["reduceOnly"],
            close_position=data["closePosition"],
            stop_price=to_decimal(data["stopPrice"]),
            orig_type=data["origType"],
            update_time=data["updateTime"],
            other=unmapped(data, _FUTURES_ORDER_FIELDS),
        )


_SPOT_ORDER_FIELDS = (
    "symbol", "orderId", "orderListId", "clientOrderId", "transactTime",
    "price", "origQty", "executedQty", "cummulativeQuoteQty", "status",
    "timeInForce", "type", "side", "fills",
)


@dataclass
class SpotOrder:
    """Spot order placement result."""
    symbol: str
    order_id: int
    order_list_id: int
    client_order_id: str
    transact_time: int
    price: Decimal
    orig_qty: Decimal
    executed_qty: Decimal
    cummulative_quote_qty: Decimal
    status: str
    time_in_force: str
    order_type: str
    side: str
    fills: List[Dict[str, Any]] = field(default_factory=list)
    other: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_binance(cls, data: dict) -> "SpotOrder":
        return cls(
            symbol=data["symbol"],
            order_id=data["orderId"],
            order_list_id=data["orderListId"],
            client_order_id=data["clientOrderId"],
            transact_time=data["transactTime"],
            price=to_decimal(data["price"]),
            orig_qty=to_decimal(data["origQty"]),
            executed_qty=to_decimal(data["executedQty"]),
            cummulative_quote_qty=to_decimal(data["cummulativeQuoteQty"]),
            status=data["status"],
            time_in_force=data["timeInForce"],
            order_type=data["type"],
            side=data["side"],
            fills=data.get("fills", []),
            other=unmapped(data, _SPOT_ORDER_FIELDS),
        )


@dataclass
class CancelOrderResponse:
    """Cancel result; the full order body stays in ``other``."""
    order_id: int
    symbol: str
    status: str
    client_order_id: str
    price: Decimal
    other: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_binance(cls, data: dict) -> "CancelOrderResponse":
        return cls(
            order_id=data["orderId"],
            symbol=data["symbol"],
            status=data["status"],
            client_order_id=data["clientOrderId"],
            price=to_decimal(data["price"]),
            other=unmapped(data, ("orderId", "symbol", "status", "clientOrderId", "price")),
        )


_POSITION_FIELDS = (
    "symbol", "positionAmt", "entryPrice", "markPrice", "unRealizedProfit",
    "liquidationPrice", "leverage", "marginType", "isolatedMargin",
    "isAutoAddMargin", "positionSide", "maxNotionalValue",
)


@dataclass
class PositionEntry:
    """Futures position risk entry."""
    symbol: str
    position_amount: Decimal
    entry_price: Decimal
    mark_price: Decimal
    unrealized_profit: Decimal
    liquidation_price: Decimal
    leverage: int
    margin_type: str
    isolated_margin: Decimal
    auto_add_margin: bool
    position_side: str
    max_notional_value: Optional[Decimal] = None
    other: Dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> tuple:
        """Positions are keyed by symbol and position side."""
        return (self.symbol, self.position_side)

    @property
    def is_open(self) -> bool:
        return self.position_amount != 0

    @classmethod
    def from_binance(cls, data: dict) -> "PositionEntry":
        return cls(
            symbol=data["symbol"],
            position_amount=to_decimal(data["positionAmt"]),
            entry_price=to_decimal(data["entryPrice"]),
            mark_price=to_decimal(data["markPrice"]),
            unrealized_profit=to_decimal(data["unRealizedProfit"]),
            liquidation_price=to_decimal(data["liquidationPrice"]),
            leverage=int(data["leverage"]),
            margin_type=data["marginType"],
            isolated_margin=to_decimal(data["isolatedMargin"]),
            # Binance sends this one as the string "true"/"false"
            auto_add_margin=str(data["isAutoAddMargin"]).lower() == "true",
            position_side=data["positionSide"],
            max_notional_value=to_opt_decimal(data.get("maxNotionalValue")),
            other=unmapped(data, _POSITION_FIELDS),
        )


@dataclass
class Balance:
    asset: str
    free: Decimal
    locked: Decimal

    @property
    def total(self) -> Decimal:
        return self.free + self.locked

    @classmethod
    def from_binance(cls, data: dict) -> "Balance":
        return cls(
            asset=data["asset"],
            free=to_decimal(data["free"]),
            locked=to_decimal(data["locked"]),
        )


@dataclass
class SpotAccount:
    can_trade: bool
    balances: List[Balance]
    other: Dict[str, Any] = field(default_factory=dict)

    def balance(self, asset: str) -> Optional[Balance]:
        for balance in self.balances:
            if balance.asset == asset:
                return balance
        return None

    @classmethod
    def from_binance(cls, data: dict) -> "SpotAccount":
        return cls(
            can_trade=data["canTrade"],
            balances=[Balance.from_binance(b) for b in data["balances"]],
            other=unmapped(data, ("canTrade", "balances")),
        )


@dataclass
class SymbolInfo:
    """Trading rules for a symbol; filters are left as raw dicts."""
    symbol: str
    status: str
    base_asset: str
    quote_asset: str
    filters: List[Dict[str, Any]]
    other: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_trading(self) -> bool:
        return self.status == "TRADING"

    def get_filter(self, filter_type: str) -> Optional[Dict[str, Any]]:
        for f in self.filters:
            if f.get("filterType") == filter_type:
                return f
        return None

    @classmethod
    def from_binance(cls, data: dict) -> "SymbolInfo":
        return cls(
            symbol=data["symbol"],
            status=data["status"],
            base_asset=data["baseAsset"],
            quote_asset=data["quoteAsset"],
            filters=data.get("filters", []),
            other=unmapped(data, ("symbol", "status", "baseAsset", "quoteAsset", "filters")),
        )


@dataclass
class ExchangeInfo:
    symbols: List[SymbolInfo]
    rate_limits: List[Dict[str, Any]] = field(default_factory=list)
    other: Dict[str, Any] = field(default_factory=dict)

    def symbol(self, name: str) -> Optional[SymbolInfo]:
        for info in self.symbols:
            if info.symbol == name:
                return info
        return None

    @classmethod
    def from_binance(cls, data: dict) -> "ExchangeInfo":
        return cls(
            symbols=[SymbolInfo.from_binance(s) for s in data["symbols"]],
            rate_limits=data.get("rateLimits", []),
            other=unmapped(data, ("symbols", "rateLimits")),
        )
