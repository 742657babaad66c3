"""Pre-trade validation and post-fill extension points."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from clob.domain import (
    TIF,
    MarketID,
    OrderFlags,
    OrderID,
    OrderType,
    RejectionReason,
    Side,
    UserID,
)
from clob.domain import Fill
from clob.fixedpoint import Decimal, zero

__all__ = ["OrderContext", "ValidationResult", "PreOrderHook", "PostFillHook"]


@dataclass(frozen=True)
class OrderContext:
    """Everything known about an incoming order before it reaches matching."""

    market_id: MarketID
    user_id: UserID
    order_id: OrderID
    side: Side
    order_type: OrderType
    price: Decimal = field(default_factory=lambda: zero(0))
    qty: Decimal = field(default_factory=lambda: zero(0))
    tif: TIF = TIF.GTC
    flags: OrderFlags = OrderFlags(0)
    config: Any = None


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a :class:`PreOrderHook` check."""

    ok: bool
    reason: RejectionReason | None = None
    message: str = ""

    @classmethod
    def accept(cls) -> ValidationResult:
        return cls(ok=True)

    @classmethod
    def reject(cls, reason: RejectionReason, message: str) -> ValidationResult:
        return cls(ok=False, reason=reason, message=message)


@runtime_checkable
class PreOrderHook(Protocol):
    """Called before any order reaches matching.

    A result with ``ok`` false means the order is rejected and never enters
    the book. This is where credit checks, risk limits and fat-finger guards
    belong.
    """

    def validate(self, context: OrderContext) -> ValidationResult:
        ...


@runtime_checkable
class PostFillHook(Protocol):
    """Called once per fill after matching is complete."""

    def on_fill(self, fill: Fill) -> None:
        ...