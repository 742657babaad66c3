from dataclasses import dataclass, field

import pytest

from clob.domain import Fill
from clob.fees import (
    FlatRateFeeCalculator,
    TieredFeeCalculator,
    ZeroFeeCalculator,
    find_tier,
)
from clob.fixedpoint import Decimal, parse_decimal, zero


@dataclass
class _Tier:
    min_volume: Decimal
    maker_fee_rate: Decimal
    taker_fee_rate: Decimal


@dataclass
class _Schedule:
    maker_fee_rate: Decimal = field(default_factory=lambda: zero(4))
    taker_fee_rate: Decimal = field(default_factory=lambda: zero(4))
    fee_currency: str = ""
    tiers: list = field(default_factory=list)


class _FakeVolume:
    def __init__(self, volume, want_market_id):
        self.volume = volume
        self.want_market_id = want_market_id
        self.market_ids = []

    def get_volume(self, user_id, market_id):
        self.market_ids.append(market_id)
        return self.volume


def _fill():
    return Fill(price=parse_decimal("100.00", 2), qty=parse_decimal("10", 0))


def _tiered_schedule():
    return _Schedule(
        maker_fee_rate=Decimal(-10, 4),
        taker_fee_rate=Decimal(30, 4),
        fee_currency="USD",
        tiers=[_Tier(Decimal(10000, 0), Decimal(-20, 4), Decimal(20, 4))],
    )


def test_flat_rate_basic_fee():
    schedule = _Schedule(Decimal(-10, 4), Decimal(30, 4), "USD")
    result = FlatRateFeeCalculator().calculate(schedule, _fill())
    assert result.maker_fee == parse_decimal("-1.00", 2)
    assert result.taker_fee == parse_decimal("3.00", 2)
    assert result.currency == "USD"


def test_flat_rate_zero_fee():
    fill = Fill(price=parse_decimal("50.00", 2), qty=parse_decimal("5", 0))
    schedule = _Schedule(zero(4), zero(4), "USD")
    result = FlatRateFeeCalculator().calculate(schedule, fill)
    assert result.maker_fee.is_zero()
    assert result.taker_fee.is_zero()


def test_tiered_base_tier():
    volume = _FakeVolume(zero(0), "BTC-USD")
    calc = TieredFeeCalculator(volume=volume, market_id="BTC-USD")
    result = calc.calculate(_tiered_schedule(), _fill())
    assert result.maker_fee == parse_decimal("-1.00", 2)
    assert volume.market_ids == ["BTC-USD", "BTC-USD"]


def test_tiered_higher_tier():
    volume = _FakeVolume(Decimal(50000, 0), "BTC-USD")
    calc = TieredFeeCalculator(volume=volume, market_id="BTC-USD")
    result = calc.calculate(_tiered_schedule(), _fill())
    assert result.maker_fee == parse_decimal("-2.00", 2)
    assert volume.market_ids == ["BTC-USD", "BTC-USD"]


def test_find_tier_none_below_minimum():
    tiers = _tiered_schedule().tiers
    assert find_tier(tiers, Decimal(9999, 0)) is None
    assert find_tier([], Decimal(50000, 0)) is None


def test_find_tier_picks_highest_qualifying():
    low = _Tier(Decimal(10000, 0), Decimal(-20, 4), Decimal(20, 4))
    high = _Tier(Decimal(100000, 0), Decimal(-30, 4), Decimal(10, 4))
    assert find_tier([low, high], Decimal(10000, 0)) is low
    assert find_tier([low, high], Decimal(100000, 0)) is high


def test_find_tier_precision_mismatch_raises():
    tiers = _tiered_schedule().tiers
    with pytest.raises(ValueError):
        find_tier(tiers, Decimal(1, 2))


def test_zero_fee_calculator():
    schedule = _Schedule(fee_currency="USD")
    result = ZeroFeeCalculator().calculate(schedule, _fill())
    assert result.maker_fee.is_zero()
    assert result.taker_fee.is_zero()
    assert result.maker_fee.precision == 2
    assert result.currency == "USD"