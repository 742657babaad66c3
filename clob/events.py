"""Events emitted by the matching engine.

Every event carries a sequence number, a timestamp and a market id. Events
serialise to JSON with camel-case keys; decimals are always written as
quoted strings, never as binary floating point.
"""

import enum
import json
import types
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Union, get_args, get_origin

from clob.domain import (
    TIF,
    CancelReason,
    FillID,
    MarketID,
    OrderFlags,
    OrderID,
    OrderType,
    RejectionReason,
    Side,
    TradeID,
    UserID,
)
from clob.fixedpoint import Decimal, DecimalError, zero

__all__ = [
    "EventType",
    "DepthUpdateType",
    "Role",
    "Event",
    "OrderAccepted",
    "OrderRested",
    "TradeFill",
    "TradeExecuted",
    "OrderCanceled",
    "OrderRejected",
    "OrderExpired",
    "StopTriggered",
    "MarketHalted",
    "MarketResumed",
    "DepthLevel",
    "DepthUpdate",
    "BookSnapshot",
    "AuctionOpened",
    "AuctionCleared",
]


class EventType(str, enum.Enum):
    """Discriminator strings for each kind of event."""

    ORDER_ACCEPTED = "order_accepted"
    ORDER_RESTED = "order_rested"
    TRADE_FILL = "trade_fill"
    TRADE_EXECUTED = "trade_executed"
    ORDER_CANCELED = "order_canceled"
    ORDER_REJECTED = "order_rejected"
    ORDER_EXPIRED = "order_expired"
    STOP_TRIGGERED = "stop_triggered"
    MARKET_HALTED = "market_halted"
    MARKET_RESUMED = "market_resumed"
    DEPTH_UPDATE = "depth_update"
    BOOK_SNAPSHOT = "book_snapshot"
    AUCTION_OPENED = "auction_opened"
    AUCTION_CLEARED = "auction_cleared"

    def __str__(self) -> str:
        return self.value


class DepthUpdateType(str, enum.Enum):
    """Whether a depth level was added, modified or removed."""

    ADD = "add"
    MODIFY = "modify"
    DELETE = "delete"

    def __str__(self) -> str:
        return self.value


class Role(str, enum.Enum):
    """Whether a user was the maker or the taker of a trade."""

    MAKER = "maker"
    TAKER = "taker"

    def __str__(self) -> str:
        return self.value


_REGISTRY: dict[str, type] = {}


def _camel(name: str) -> str:
    first, *rest = name.split("_")
    return first + "".join("ID" if part == "id" else part.capitalize() for part in rest)


def _encode(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, DepthLevel):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_encode(item) for item in value]
    return value


def _decode(hint: Any, raw: Any) -> Any:
    if raw is None:
        return None
    origin = get_origin(hint)
    if origin in (Union, types.UnionType):
        options = [arg for arg in get_args(hint) if arg is not type(None)]
        return _decode(options[0], raw)
    if origin is list:
        (item_hint,) = get_args(hint)
        return [_decode(item_hint, item) for item in raw]
    if hint is Decimal:
        if not isinstance(raw, str):
            raise DecimalError(f"decimal must be a JSON string, got {raw!r}")
        return Decimal.from_string(raw)
    if isinstance(hint, type) and issubclass(hint, DepthLevel):
        return _from_mapping(hint, raw)
    if isinstance(hint, type) and issubclass(hint, enum.Enum):
        return hint(raw)
    return raw


def _to_mapping(obj: Any) -> dict[str, Any]:
    return {_camel(f.name): _encode(getattr(obj, f.name)) for f in fields(obj)}


def _from_mapping(cls: type, data: Any) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object for {cls.__name__}, got {data!r}")
    kwargs = {}
    for f in fields(cls):
        key = _camel(f.name)
        if key in data:
            kwargs[f.name] = _decode(f.type, data[key])
    return cls(**kwargs)


def _zero() -> Decimal:
    return zero(0)


@dataclass(frozen=True, kw_only=True)
class Event:
    """Fields shared by every engine event."""

    _event_type: ClassVar[Union[EventType, None]] = None

    seq_num: int = 0
    timestamp: int = 0
    market_id: MarketID = ""

    def __init_subclass__(cls, event_type: Union[EventType, None] = None, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if event_type is not None:
            cls._event_type = event_type
            _REGISTRY[event_type.value] = cls

    def type(self) -> EventType:
        """Return the discriminator of this event."""
        if self._event_type is None:
            raise TypeError(f"{self.__class__.__name__} has no event type")
        return self._event_type

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation as a plain dict."""
        return _to_mapping(self)

    def to_json(self) -> str:
        """Serialise to compact JSON."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "Event":
        """Parse JSON into this event class.

        Called on :class:`Event` itself, the object must carry a ``"type"``
        key naming the concrete event.
        """
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"event JSON must be an object, got {data!r}")
        target: type = cls
        if cls._event_type is None:
            name = data.get("type")
            if name not in _REGISTRY:
                raise ValueError(f"unknown or missing event type {name!r}")
            target = _REGISTRY[name]
        return _from_mapping(target, data)


@dataclass(frozen=True, kw_only=True)
class OrderAccepted(Event, event_type=EventType.ORDER_ACCEPTED):
    """An order passed validation and entered the engine."""

    order_id: OrderID = ""
    user_id: UserID = ""
    side: Union[Side, None] = None
    order_type: Union[OrderType, None] = None
    price: Decimal = field(default_factory=_zero)
    stop_price: Decimal = field(default_factory=_zero)
    orig_qty: Decimal = field(default_factory=_zero)
    display_qty: Decimal = field(default_factory=_zero)
    tif: Union[TIF, None] = None
    flags: OrderFlags = OrderFlags(0)
    order_seq_num: int = 0


@dataclass(frozen=True, kw_only=True)
class OrderRested(Event, event_type=EventType.ORDER_RESTED):
    """An order, or what remains of it, rests in the book."""

    order_id: OrderID = ""
    user_id: UserID = ""
    side: Union[Side, None] = None
    price: Decimal = field(default_factory=_zero)
    remain_qty: Decimal = field(default_factory=_zero)
    display_qty: Decimal = field(default_factory=_zero)


@dataclass(frozen=True, kw_only=True)
class TradeFill(Event, event_type=EventType.TRADE_FILL):
    """One side of a trade; two are emitted per trade, maker and taker."""

    fill_id: FillID = ""
    trade_id: TradeID = ""
    order_id: OrderID = ""
    user_id: UserID = ""
    role: Union[Role, None] = None
    side: Union[Side, None] = None
    price: Decimal = field(default_factory=_zero)
    filled_qty: Decimal = field(default_factory=_zero)
    remain_qty: Decimal = field(default_factory=_zero)
    fee: Decimal = field(default_factory=_zero)
    fee_currency: str = ""


@dataclass(frozen=True, kw_only=True)
class TradeExecuted(Event, event_type=EventType.TRADE_EXECUTED):
    """Summary of a trade, emitted after both fills."""

    trade_id: TradeID = ""
    maker_order_id: OrderID = ""
    maker_user_id: UserID = ""
    maker_side: Union[Side, None] = None
    maker_remain_qty: Decimal = field(default_factory=_zero)
    maker_fee: Decimal = field(default_factory=_zero)
    taker_order_id: OrderID = ""
    taker_user_id: UserID = ""
    taker_remain_qty: Decimal = field(default_factory=_zero)
    taker_fee: Decimal = field(default_factory=_zero)
    price: Decimal = field(default_factory=_zero)
    qty: Decimal = field(default_factory=_zero)
    fee_currency: str = ""


@dataclass(frozen=True, kw_only=True)
class OrderCanceled(Event, event_type=EventType.ORDER_CANCELED):
    """An order was removed from the book."""

    order_id: OrderID = ""
    user_id: UserID = ""
    side: Union[Side, None] = None
    price: Decimal = field(default_factory=_zero)
    canceled_qty: Decimal = field(default_factory=_zero)
    filled_qty: Decimal = field(default_factory=_zero)
    reason: Union[CancelReason, None] = None


@dataclass(frozen=True, kw_only=True)
class OrderRejected(Event, event_type=EventType.ORDER_REJECTED):
    """An order failed pre-trade validation."""

    order_id: OrderID = ""
    user_id: UserID = ""
    reason: Union[RejectionReason, None] = None
    message: str = ""


@dataclass(frozen=True, kw_only=True)
class OrderExpired(Event, event_type=EventType.ORDER_EXPIRED):
    """A good-till-date order reached its expiry."""

    order_id: OrderID = ""
    user_id: UserID = ""
    side: Union[Side, None] = None
    price: Decimal = field(default_factory=_zero)
    expired_qty: Decimal = field(default_factory=_zero)


@dataclass(frozen=True, kw_only=True)
class StopTriggered(Event, event_type=EventType.STOP_TRIGGERED):
    """A stop order fired and was converted."""

    stop_order_id: OrderID = ""
    user_id: UserID = ""
    trigger_price: Decimal = field(default_factory=_zero)
    converted_to: Union[OrderType, None] = None
    converted_price: Decimal = field(default_factory=_zero)


@dataclass(frozen=True, kw_only=True)
class MarketHalted(Event, event_type=EventType.MARKET_HALTED):
    """The market entered the halted state."""

    reason: str = ""
    halt_type: str = ""


@dataclass(frozen=True, kw_only=True)
class MarketResumed(Event, event_type=EventType.MARKET_RESUMED):
    """The market left the halted state."""

    resumed_by: str = ""


@dataclass(frozen=True, kw_only=True)
class DepthLevel:
    """One price level of a snapshot."""

    price: Decimal = field(default_factory=_zero)
    total_qty: Decimal = field(default_factory=_zero)
    display_qty: Decimal = field(default_factory=_zero)
    order_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return _to_mapping(self)


@dataclass(frozen=True, kw_only=True)
class DepthUpdate(Event, event_type=EventType.DEPTH_UPDATE):
    """A price level changed because of an order event."""

    side: Union[Side, None] = None
    price: Decimal = field(default_factory=_zero)
    new_total_qty: Decimal = field(default_factory=_zero)
    new_display_qty: Decimal = field(default_factory=_zero)
    new_order_count: int = 0
    update_type: Union[DepthUpdateType, None] = None


@dataclass(frozen=True, kw_only=True)
class BookSnapshot(Event, event_type=EventType.BOOK_SNAPSHOT):
    """The full book at one point in time."""

    bids: list[DepthLevel] = field(default_factory=list)
    asks: list[DepthLevel] = field(default_factory=list)


@dataclass(frozen=True, kw_only=True)
class AuctionOpened(Event, event_type=EventType.AUCTION_OPENED):
    """The opening auction began."""

    indicative_price: Decimal = field(default_factory=_zero)
    indicative_qty: Decimal = field(default_factory=_zero)


@dataclass(frozen=True, kw_only=True)
class AuctionCleared(Event, event_type=EventType.AUCTION_CLEARED):
    """The opening auction executed."""

    clearing_price: Decimal = field(default_factory=_zero)
    matched_qty: Decimal = field(default_factory=_zero)