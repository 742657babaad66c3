"""Market lifecycle state machine.

A :class:`Machine` starts in ``PRE_OPEN`` and moves through ``AUCTION``,
``OPEN``, ``HALTED`` and ``CLOSED``. Each state decides which order types
are accepted and whether matching runs.
"""

from __future__ import annotations

import enum
from typing import Any

__all__ = ["MarketState", "InvalidTransitionError", "can_transition", "Machine"]


class MarketState(enum.IntEnum):
    """Operating state of a market."""

    PRE_OPEN = 1
    AUCTION = 2
    OPEN = 3
    HALTED = 4
    CLOSED = 5

    def __str__(self) -> str:
        return _NAMES[self]


_NAMES = {
    MarketState.PRE_OPEN: "PreOpen",
    MarketState.AUCTION: "Auction",
    MarketState.OPEN: "Open",
    MarketState.HALTED: "Halted",
    MarketState.CLOSED: "Closed",
}

_VALID_TRANSITIONS: dict[MarketState, frozenset[MarketState]] = {
    MarketState.PRE_OPEN: frozenset(
        {MarketState.AUCTION, MarketState.OPEN, MarketState.HALTED, MarketState.CLOSED}
    ),
    MarketState.AUCTION: frozenset(
        {MarketState.OPEN, MarketState.HALTED, MarketState.CLOSED}
    ),
    MarketState.OPEN: frozenset({MarketState.HALTED, MarketState.CLOSED}),
    MarketState.HALTED: frozenset(
        {MarketState.OPEN, MarketState.AUCTION, MarketState.CLOSED}
    ),
    MarketState.CLOSED: frozenset(),
}


class InvalidTransitionError(ValueError):
    """Raised when a state transition is not allowed."""


def can_transition(src: MarketState, dst: MarketState) -> bool:
    """True if moving from ``src`` to ``dst`` is allowed."""
    return dst in _VALID_TRANSITIONS.get(src, frozenset())


class Machine:
    """Holds a market's state and enforces valid transitions."""

    def __init__(self, config: Any = None, state: MarketState = MarketState.PRE_OPEN) -> None:
        self.config = config
        self.state = MarketState(state)

    @property
    def current(self) -> MarketState:
        return self.state

    def transition(self, to: MarketState) -> None:
        """Move to ``to`` or raise :class:`InvalidTransitionError`."""
        if not can_transition(self.state, to):
            raise InvalidTransitionError(
                f"invalid state transition: {self.state} -> {MarketState(to)}"
            )
        self.state = MarketState(to)

    def can_accept_limit_order(self) -> bool:
        """Halted markets still accept limit orders, which queue unmatched."""
        return self.state in (
            MarketState.OPEN,
            MarketState.AUCTION,
            MarketState.PRE_OPEN,
            MarketState.HALTED,
        )

    def can_accept_market_order(self) -> bool:
        return self.state is MarketState.OPEN

    def can_accept_stop_order(self) -> bool:
        """Halted markets still accept stop orders, which queue in the stop book."""
        return self.state in (MarketState.OPEN, MarketState.HALTED)

    def can_match(self) -> bool:
        return self.state is MarketState.OPEN

    def can_cancel(self) -> bool:
        return self.state in (
            MarketState.OPEN,
            MarketState.HALTED,
            MarketState.AUCTION,
            MarketState.PRE_OPEN,
        )