import json

import pytest

from clob.domain import RejectionReason, Side
from clob.events import (
    AuctionCleared,
    AuctionOpened,
    BookSnapshot,
    DepthLevel,
    DepthUpdate,
    DepthUpdateType,
    Event,
    MarketHalted,
    MarketResumed,
    OrderAccepted,
    OrderCanceled,
    OrderExpired,
    OrderRejected,
    OrderRested,
    Role,
    StopTriggered,
    TradeExecuted,
    TradeFill,
)
from clob.fixedpoint import parse_decimal


def _rejected():
    return OrderRejected(
        seq_num=1,
        timestamp=1000000,
        market_id="AAPL",
        order_id="ord_test",
        user_id="user1",
        reason=RejectionReason.INVALID_TICK,
        message="price not on tick",
    )


def _trade_fill():
    return TradeFill(
        seq_num=2,
        timestamp=2000000,
        market_id="AAPL",
        fill_id="fil_1",
        trade_id="trd_1",
        order_id="ord_1",
        user_id="user1",
        role=Role.MAKER,
        side=Side.BID,
        price=parse_decimal("101.25", 2),
        filled_qty=parse_decimal("10", 0),
        remain_qty=parse_decimal("0", 0),
        fee=parse_decimal("-0.1012", 4),
    )


def _snapshot():
    return BookSnapshot(
        seq_num=3,
        timestamp=3000000,
        market_id="AAPL",
        bids=[
            DepthLevel(
                price=parse_decimal("100.00", 2),
                total_qty=parse_decimal("50", 0),
                order_count=2,
            )
        ],
        asks=[
            DepthLevel(
                price=parse_decimal("101.00", 2),
                total_qty=parse_decimal("30", 0),
                order_count=1,
            )
        ],
    )


def test_order_rejected_json_round_trip():
    ev = _rejected()
    text = ev.to_json()
    assert "e+" not in text and "e-" not in text
    got = OrderRejected.from_json(text)
    assert got.order_id == ev.order_id
    assert got.reason == ev.reason
    assert got == ev


def test_trade_fill_price_is_quoted_string():
    text = _trade_fill().to_json()
    assert '"price":"101.25"' in text


def test_trade_fill_round_trip():
    ev = _trade_fill()
    got = TradeFill.from_json(ev.to_json())
    assert got == ev
    assert str(got.fee) == "-0.1012"
    assert got.role is Role.MAKER


def test_book_snapshot_serialises_prices_as_strings():
    text = _snapshot().to_json()
    assert '"100.00"' in text


def test_book_snapshot_round_trip():
    ev = _snapshot()
    got = BookSnapshot.from_json(ev.to_json())
    assert got == ev
    assert got.bids[0].order_count == 2


def test_base_fields_use_camel_case_keys():
    data = _rejected().to_dict()
    assert data["seqNum"] == 1
    assert data["timestamp"] == 1000000
    assert data["marketID"] == "AAPL"
    assert data["orderID"] == "ord_test"
    assert data["reason"] == 1


def test_depth_level_to_dict():
    level = DepthLevel(
        price=parse_decimal("100.00", 2),
        total_qty=parse_decimal("50", 0),
        display_qty=parse_decimal("20", 0),
        order_count=2,
    )
    assert level.to_dict() == {
        "price": "100.00",
        "totalQty": "50",
        "displayQty": "20",
        "orderCount": 2,
    }


def test_depth_update_encodes_update_type():
    ev = DepthUpdate(
        side=Side.ASK,
        price=parse_decimal("1.50", 2),
        update_type=DepthUpdateType.DELETE,
    )
    data = json.loads(ev.to_json())
    assert data["updateType"] == "delete"
    assert data["side"] == 2
    assert DepthUpdate.from_json(ev.to_json()).update_type is DepthUpdateType.DELETE


def test_event_from_json_dispatches_on_type_key():
    data = _rejected().to_dict()
    data["type"] = "order_rejected"
    got = Event.from_json(json.dumps(data))
    assert isinstance(got, OrderRejected)
    assert got.message == "price not on tick"


def test_event_from_json_without_type_raises():
    with pytest.raises(ValueError):
        Event.from_json(_rejected().to_json())


@pytest.mark.parametrize(
    "cls, want",
    [
        (OrderAccepted, "order_accepted"),
        (OrderRested, "order_rested"),
        (TradeFill, "trade_fill"),
        (TradeExecuted, "trade_executed"),
        (OrderCanceled, "order_canceled"),
        (OrderRejected, "order_rejected"),
        (OrderExpired, "order_expired"),
        (StopTriggered, "stop_triggered"),
        (MarketHalted, "market_halted"),
        (MarketResumed, "market_resumed"),
        (DepthUpdate, "depth_update"),
        (BookSnapshot, "book_snapshot"),
        (AuctionOpened, "auction_opened"),
        (AuctionCleared, "auction_cleared"),
    ],
)
def test_event_type_methods(cls, want):
    assert cls().type() == want