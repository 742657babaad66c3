"""Maker and taker fee calculation.

A fee schedule is any object with ``maker_fee_rate`` and ``taker_fee_rate``
(decimals at precision 4), ``fee_currency`` and, for tiered fees, ``tiers``:
a sequence of objects with ``min_volume``, ``maker_fee_rate`` and
``taker_fee_rate``, in ascending order of volume.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from clob.domain import Fill, MarketID, UserID
from clob.fixedpoint import Decimal, zero

__all__ = [
    "FeeResult",
    "FeeCalculator",
    "VolumeProvider",
    "FlatRateFeeCalculator",
    "TieredFeeCalculator",
    "ZeroFeeCalculator",
    "find_tier",
]

_RATE_SCALE = 10_000


@dataclass(frozen=True)
class FeeResult:
    """Fees for a single fill, at the fill's price precision."""

    maker_fee: Decimal
    taker_fee: Decimal
    currency: str


@runtime_checkable
class FeeCalculator(Protocol):
    def calculate(self, schedule: Any, fill: Fill) -> FeeResult:
        ...


@runtime_checkable
class VolumeProvider(Protocol):
    """Supplies a user's trailing traded volume in a market."""

    def get_volume(self, user_id: UserID, market_id: MarketID) -> Decimal:
        ...


def _trunc_div(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // abs(denominator)
    return -quotient if (numerator < 0) != (denominator < 0) else quotient


def _notional(fill: Fill) -> int:
    """price × qty as a mantissa at the price precision."""
    return _trunc_div(fill.price.value * fill.qty.value, 10**fill.qty.precision)


def _fee(notional: int, rate: Decimal, precision: int) -> Decimal:
    return Decimal(_trunc_div(notional * rate.value, _RATE_SCALE), precision)


class FlatRateFeeCalculator:
    """Fixed maker and taker rates on notional; a negative maker rate is a rebate."""

    def calculate(self, schedule: Any, fill: Fill) -> FeeResult:
        notional = _notional(fill)
        precision = fill.price.precision
        return FeeResult(
            maker_fee=_fee(notional, schedule.maker_fee_rate, precision),
            taker_fee=_fee(notional, schedule.taker_fee_rate, precision),
            currency=schedule.fee_currency,
        )


def find_tier(tiers: Sequence[Any], volume: Decimal) -> Optional[Any]:
    """Return the last tier whose minimum volume ``volume`` reaches, or None."""
    match = None
    for tier in tiers:
        if volume >= tier.min_volume:
            match = tier
    return match


@dataclass
class TieredFeeCalculator:
    """Rates chosen per user by trailing volume in ``market_id``."""

    volume: VolumeProvider
    market_id: MarketID

    def calculate(self, schedule: Any, fill: Fill) -> FeeResult:
        tiers = getattr(schedule, "tiers", None) or ()
        maker_tier = find_tier(
            tiers, self.volume.get_volume(fill.maker_user_id, self.market_id)
        )
        taker_tier = find_tier(
            tiers, self.volume.get_volume(fill.taker_user_id, self.market_id)
        )
        maker_rate = maker_tier.maker_fee_rate if maker_tier else schedule.maker_fee_rate
        taker_rate = taker_tier.taker_fee_rate if taker_tier else schedule.taker_fee_rate

        notional = _notional(fill)
        precision = fill.price.precision
        return FeeResult(
            maker_fee=_fee(notional, maker_rate, precision),
            taker_fee=_fee(notional, taker_rate, precision),
            currency=schedule.fee_currency,
        )


class ZeroFeeCalculator:
    """Always charges nothing; the default without a fee schedule."""

    def calculate(self, schedule: Any, fill: Fill) -> FeeResult:
        precision = fill.price.precision
        return FeeResult(
            maker_fee=zero(precision),
            taker_fee=zero(precision),
            currency=schedule.fee_currency,
        )