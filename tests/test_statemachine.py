import pytest

from clob.fixedpoint import parse_decimal
from clob.statemachine import (
    InvalidTransitionError,
    Machine,
    MarketState,
    can_transition,
)

S = MarketState


def _machine(state=S.PRE_OPEN):
    config = {
        "market_id": "TEST-USD",
        "base_asset": "TEST",
        "quote_asset": "USD",
        "price_precision": 2,
        "qty_precision": 0,
        "tick_size": parse_decimal("0.01", 2),
        "lot_size": parse_decimal("1", 0),
    }
    return Machine(config, state)


def test_initial_state():
    assert Machine().current is S.PRE_OPEN
    assert _machine().current is S.PRE_OPEN


@pytest.mark.parametrize(
    "src,dst",
    [
        (S.PRE_OPEN, S.AUCTION),
        (S.PRE_OPEN, S.OPEN),
        (S.PRE_OPEN, S.HALTED),
        (S.PRE_OPEN, S.CLOSED),
        (S.AUCTION, S.OPEN),
        (S.AUCTION, S.HALTED),
        (S.AUCTION, S.CLOSED),
        (S.OPEN, S.HALTED),
        (S.OPEN, S.CLOSED),
        (S.HALTED, S.OPEN),
        (S.HALTED, S.AUCTION),
        (S.HALTED, S.CLOSED),
    ],
)
def test_valid_transitions(src, dst):
    machine = _machine(src)
    machine.transition(dst)
    assert machine.current is dst
    assert can_transition(src, dst) is True


@pytest.mark.parametrize(
    "src,dst",
    [
        (S.AUCTION, S.PRE_OPEN),
        (S.OPEN, S.PRE_OPEN),
        (S.OPEN, S.AUCTION),
        (S.HALTED, S.PRE_OPEN),
        (S.CLOSED, S.OPEN),
        (S.CLOSED, S.HALTED),
        (S.CLOSED, S.PRE_OPEN),
        (S.CLOSED, S.AUCTION),
    ],
)
def test_invalid_transitions(src, dst):
    machine = _machine(src)
    with pytest.raises(InvalidTransitionError):
        machine.transition(dst)
    assert machine.current is src
    assert can_transition(src, dst) is False


def test_permissions_open():
    machine = _machine(S.OPEN)
    assert machine.can_accept_limit_order()
    assert machine.can_accept_market_order()
    assert machine.can_accept_stop_order()
    assert machine.can_match()
    assert machine.can_cancel()


def test_permissions_halted():
    machine = _machine(S.HALTED)
    assert machine.can_accept_limit_order()
    assert not machine.can_accept_market_order()
    assert machine.can_accept_stop_order()
    assert not machine.can_match()
    assert machine.can_cancel()


def test_permissions_closed():
    machine = _machine(S.CLOSED)
    assert not machine.can_accept_limit_order()
    assert not machine.can_accept_market_order()
    assert not machine.can_match()
    assert not machine.can_cancel()


def test_permissions_pre_open():
    machine = _machine(S.PRE_OPEN)
    assert machine.can_accept_limit_order()
    assert not machine.can_accept_market_order()
    assert not machine.can_accept_stop_order()
    assert not machine.can_match()
    assert machine.can_cancel()


def test_state_names():
    names = [str(Machine(None, state).current) for state in MarketState]
    assert names == ["PreOpen", "Auction", "Open", "Halted", "Closed"]