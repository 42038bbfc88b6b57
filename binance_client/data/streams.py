"""
Stream names and kline intervals.

Binance stream names are ``<lowercase symbol>@<channel>``.
"""

from enum import Enum
from typing import Union


class Interval(Enum):
    """Common kline intervals."""
    ONE_MINUTE = "1m"
    THREE_MINUTE = "3m"
    FIVE_MINUTE = "5m"
    FIFTEEN_MINUTE = "15m"
    ONE_HOUR = "1h"
    FOUR_HOUR = "4h"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> Union["Interval", str]:
        """Interval for value, or value unchanged if it is not a known interval."""
        try:
            return cls(value)
        except ValueError:
            return value

    def to_seconds(self) -> int:
        return _INTERVAL_SECONDS[self]

    def to_millis(self) -> int:
        return self.to_seconds() * 1000


_INTERVAL_SECONDS = {
    Interval.ONE_MINUTE: 60,
    Interval.THREE_MINUTE: 60 * 3,
    Interval.FIVE_MINUTE: 60 * 5,
    Interval.FIFTEEN_MINUTE: 60 * 15,
    Interval.ONE_HOUR: 60 * 60,
    Interval.FOUR_HOUR: 60 * 60 * 4,
}


def trade_stream(symbol: str) -> str:
    return f"{symbol.lower()}@trade"


def agg_trade_stream(symbol: str) -> str:
    return f"{symbol.lower()}@aggTrade"


def kline_stream(symbol: str, interval: Union[Interval, str]) -> str:
    return f"{symbol.lower()}@kline_{interval}"


def liquidation_stream(symbol: str) -> str:
    return f"{symbol.lower()}@forceOrder"


def ticker_stream(symbol: str) -> str:
    return f"{symbol.lower()}@ticker"


def mark_price_stream(symbol: str, fast: bool = True) -> str:
    """Mark price stream; ``fast`` selects the 1s update speed."""
    return f"{symbol.lower()}@markPrice@1s" if fast else f"{symbol.lower()}@markPrice"


def depth_stream(symbol: str, speed_ms: int = 100) -> str:
    """Diff depth stream at the given update speed."""
    return f"{symbol.lower()}@depth@{speed_ms}ms"
