"""Domain value types: sides, order types, time in force, statuses, flags and fills."""

from __future__ import annotations

import enum
import secrets
import time
from dataclasses import dataclass, field

from clob.fixedpoint import Decimal, zero

__all__ = [
    "OrderID",
    "UserID",
    "MarketID",
    "TradeID",
    "FillID",
    "Side",
    "OrderType",
    "TIF",
    "OrderStatus",
    "CancelReason",
    "RejectionReason",
    "OrderFlags",
    "Fill",
    "new_ulid",
    "new_order_id",
    "new_trade_id",
    "new_fill_id",
]

OrderID = str
UserID = str
MarketID = str
TradeID = str
FillID = str

_CROCKFORD = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"


class Side(enum.IntEnum):
    """Direction of an order."""

    BID = 1
    ASK = 2

    def opposite(self) -> Side:
        return Side.ASK if self is Side.BID else Side.BID

    def is_bid(self) -> bool:
        return self is Side.BID

    def is_ask(self) -> bool:
        return self is Side.ASK

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def from_string(cls, text: str) -> Side:
        """Parse ``"bid"`` or ``"ask"``."""
        if text == "bid":
            return cls.BID
        if text == "ask":
            return cls.ASK
        raise ValueError(f"unknown side {text!r}")


class OrderType(enum.IntEnum):
    """Matching behaviour of an order."""

    LIMIT = 1
    MARKET = 2
    STOP = 3
    STOP_LIMIT = 4
    ICEBERG = 5

    def is_limit(self) -> bool:
        return self in (OrderType.LIMIT, OrderType.STOP_LIMIT, OrderType.ICEBERG)

    def is_market(self) -> bool:
        return self is OrderType.MARKET

    def needs_price(self) -> bool:
        return self in (OrderType.LIMIT, OrderType.STOP_LIMIT, OrderType.ICEBERG)

    def needs_stop_price(self) -> bool:
        return self in (OrderType.STOP, OrderType.STOP_LIMIT)

    def __str__(self) -> str:
        return self.name.lower()


class TIF(enum.IntEnum):
    """Time in force."""

    GTC = 1
    IOC = 2
    FOK = 3
    GTD = 4
    DAY = 5

    def can_rest(self) -> bool:
        """True if orders with this time in force may rest in the book."""
        return self in (TIF.GTC, TIF.GTD, TIF.DAY)

    def __str__(self) -> str:
        return self.name


class OrderStatus(enum.IntEnum):
    """Lifecycle state of an order."""

    NEW = 1
    RESTED = 2
    PARTIAL_FILL = 3
    FILLED = 4
    CANCELED = 5
    REJECTED = 6
    EXPIRED = 7

    def __str__(self) -> str:
        return self.name.lower()


class CancelReason(enum.IntEnum):
    """Why an order was canceled."""

    USER_REQUESTED = 1
    IOC = 2
    FOK = 3
    STP = 4
    EXPIRED = 5
    MARKET_CLOSED = 6
    ADMIN_CANCEL = 7

    def __str__(self) -> str:
        return self.name.lower()


class RejectionReason(enum.IntEnum):
    """Why an order was rejected before reaching the book."""

    INVALID_TICK = 1
    INVALID_LOT = 2
    BELOW_MIN_QTY = 3
    ABOVE_MAX_QTY = 4
    ABOVE_MAX_VALUE = 5
    FEATURE_DISABLED = 6
    MARKET_NOT_OPEN = 7
    POST_ONLY_WOULD_CROSS = 8
    FOK_FAILED = 9
    POOL_EXHAUSTED = 10
    PRE_ORDER_HOOK = 11
    INVALID_SIDE = 12
    INVALID_PRICE = 13
    DUPLICATE_ORDER_ID = 14
    STP_CANCEL_TAKER = 15
    MAX_DEPTH = 16
    ORDER_NOT_FOUND = 17

    def __str__(self) -> str:
        return self.name.lower()


class OrderFlags(enum.IntFlag):
    """Per-order behavioural modifiers."""

    POST_ONLY = 1 << 0
    REDUCE_ONLY = 1 << 1
    ICEBERG = 1 << 2

    def has(self, flags: OrderFlags) -> bool:
        """True if every bit of ``flags`` is set."""
        return int(self) & int(flags) == int(flags)

    def set(self, flags: OrderFlags) -> OrderFlags:
        return OrderFlags(int(self) | int(flags))

    def clear(self, flags: OrderFlags) -> OrderFlags:
        return OrderFlags(int(self) & ~int(flags))


@dataclass(frozen=True)
class Fill:
    """One execution produced by the match loop.

    The level fields describe the maker's price level right after the fill.
    """

    maker_order_id: OrderID = ""
    taker_order_id: OrderID = ""
    maker_user_id: UserID = ""
    taker_user_id: UserID = ""
    maker_side: Side | None = None
    price: Decimal = field(default_factory=lambda: zero(0))
    qty: Decimal = field(default_factory=lambda: zero(0))
    maker_remain_qty: Decimal = field(default_factory=lambda: zero(0))
    taker_remain_qty: Decimal = field(default_factory=lambda: zero(0))
    maker_seq_num: int = 0
    taker_seq_num: int = 0
    timestamp: int = 0
    maker_level_total_qty: Decimal = field(default_factory=lambda: zero(0))
    maker_level_display_qty: Decimal = field(default_factory=lambda: zero(0))
    maker_level_order_count: int = 0
    maker_level_exists: bool = False


def new_ulid() -> str:
    """Return a new ULID: 48-bit millisecond time plus 80 random bits."""
    timestamp = time.time_ns() // 1_000_000 & ((1 << 48) - 1)
    number = (timestamp << 80) | secrets.randbits(80)
    chars = []
    for _ in range(26):
        number, digit = divmod(number, 32)
        chars.append(_CROCKFORD[digit])
    return "".join(reversed(chars))


def new_order_id() -> OrderID:
    return "ord_" + new_ulid()


def new_trade_id() -> TradeID:
    return "trd_" + new_ulid()


def new_fill_id() -> FillID:
    return "fil_" + new_ulid()