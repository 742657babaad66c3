"""Pending stop and stop-limit orders.

Stop orders rest in a :class:`StopBook`, apart from the regular order book
and invisible to depth queries. :meth:`StopBook.check_triggers` runs after
every trade and returns the stops whose trigger price was crossed, for the
engine to convert and resubmit. Cascade depth is capped.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from typing import Any, Iterator

from clob.domain import TIF, MarketID, OrderFlags, OrderID, OrderType, Side, UserID
from clob.fixedpoint import Decimal, zero
from clob.pool import Pool

__all__ = [
    "CascadeLimitError",
    "StopNode",
    "StopLevel",
    "TriggeredOrder",
    "StopBook",
]


class CascadeLimitError(RuntimeError):
    """Raised when trigger checks go deeper than the cascade limit."""


def _zero() -> Decimal:
    return zero(0)


@dataclass(eq=False)
class StopNode:
    """A pending stop or stop-limit order."""

    order_id: OrderID = ""
    user_id: UserID = ""
    market_id: MarketID = ""
    side: Side | None = None
    tif: TIF | None = None
    flags: OrderFlags = OrderFlags(0)
    stp_mode: Any = None
    trigger_price: Decimal = field(default_factory=_zero)
    limit_price: Decimal = field(default_factory=_zero)
    qty: Decimal = field(default_factory=_zero)
    convert_to: OrderType | None = None
    expire_at: int = 0
    timestamp: int = 0
    seq_num: int = 0
    pool_index: int = 0
    _prev: StopNode | None = field(default=None, init=False, repr=False)
    _next: StopNode | None = field(default=None, init=False, repr=False)
    _level: StopLevel | None = field(default=None, init=False, repr=False)


@dataclass(eq=False)
class StopLevel:
    """First-in first-out queue of stop orders at one trigger price."""

    price: Decimal = field(default_factory=_zero)
    head: StopNode | None = field(default=None, repr=False)
    tail: StopNode | None = field(default=None, repr=False)
    order_count: int = 0
    pool_index: int = 0

    def append(self, node: StopNode) -> None:
        """Add ``node`` at the tail."""
        node._prev = self.tail
        node._next = None
        if self.tail is None:
            self.head = node
        else:
            self.tail._next = node
        self.tail = node
        self.order_count += 1
        node._level = self

    def unlink(self, node: StopNode) -> None:
        """Remove ``node`` from this level."""
        if node._prev is not None:
            node._prev._next = node._next
        else:
            self.head = node._next
        if node._next is not None:
            node._next._prev = node._prev
        else:
            self.tail = node._prev
        self.order_count -= 1
        node._prev = None
        node._next = None
        node._level = None

    def is_empty(self) -> bool:
        return self.head is None

    def __iter__(self) -> Iterator[StopNode]:
        node = self.head
        while node is not None:
            following = node._next
            yield node
            node = following


@dataclass(frozen=True)
class TriggeredOrder:
    """A stop that fired; it keeps the stop's order id."""

    order_id: OrderID
    user_id: UserID
    market_id: MarketID
    side: Side | None
    convert_to: OrderType | None
    limit_price: Decimal
    qty: Decimal
    tif: TIF | None
    flags: OrderFlags
    stp_mode: Any


class _Ladder:
    """Trigger levels of one side, kept sorted by price ascending."""

    def __init__(self) -> None:
        self.levels: dict[Decimal, StopLevel] = {}
        self.prices: list[Decimal] = []

    def add(self, level: StopLevel) -> None:
        self.levels[level.price] = level
        bisect.insort(self.prices, level.price)

    def remove(self, price: Decimal) -> StopLevel:
        del self.prices[bisect.bisect_left(self.prices, price)]
        return self.levels.pop(price)


class StopBook:
    """Holds pending stops.

    Sell stops fire, highest trigger first, when the last trade price falls to
    or below their trigger; buy stops fire, lowest trigger first, when it rises
    to or above theirs.
    """

    def __init__(
        self,
        node_pool: Pool[StopNode],
        level_pool: Pool[StopLevel],
        max_cascade_depth: int,
    ) -> None:
        self._node_pool = node_pool
        self._level_pool = level_pool
        self._max_depth = max_cascade_depth
        self._index: dict[OrderID, StopNode] = {}
        self._sells = _Ladder()
        self._buys = _Ladder()

    def _ladder(self, side: Side | None) -> _Ladder:
        return self._sells if side is Side.ASK else self._buys

    def add_stop(self, node: StopNode) -> None:
        """Queue ``node`` at its trigger price."""
        self._index[node.order_id] = node
        ladder = self._ladder(node.side)
        level = ladder.levels.get(node.trigger_price)
        if level is None:
            level, index = self._level_pool.acquire()
            level.pool_index = index
            level.price = node.trigger_price
            ladder.add(level)
        level.append(node)

    def cancel_stop(self, order_id: OrderID, user_id: UserID) -> StopNode | None:
        """Remove a stop and return its node, or None if it is unknown.

        The node's pool slot stays acquired; the caller releases it.
        """
        node = self._index.pop(order_id, None)
        if node is None:
            return None
        level = node._level
        if level is not None:
            level.unlink(node)
            if level.is_empty():
                self._ladder(node.side).remove(level.price)
                self._level_pool.release(level.pool_index)
        return node

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._index

    def check_triggers(
        self, last_trade_price: Decimal, depth: int = 0
    ) -> list[TriggeredOrder]:
        """Fire every stop reached by ``last_trade_price``.

        ``depth`` is the current cascade depth, starting at 0.
        """
        if depth >= self._max_depth:
            raise CascadeLimitError("cascade depth limit reached")

        triggered: list[TriggeredOrder] = []
        sells = self._sells
        while sells.prices and last_trade_price <= sells.prices[-1]:
            triggered.extend(self._drain(sells.remove(sells.prices[-1])))
        buys = self._buys
        while buys.prices and last_trade_price >= buys.prices[0]:
            triggered.extend(self._drain(buys.remove(buys.prices[0])))
        return triggered

    def _drain(self, level: StopLevel) -> list[TriggeredOrder]:
        fired = []
        for node in list(level):
            fired.append(
                TriggeredOrder(
                    order_id=node.order_id,
                    user_id=node.user_id,
                    market_id=node.market_id,
                    side=node.side,
                    convert_to=node.convert_to,
                    limit_price=node.limit_price,
                    qty=node.qty,
                    tif=node.tif,
                    flags=node.flags,
                    stp_mode=node.stp_mode,
                )
            )
            self._index.pop(node.order_id, None)
            self._node_pool.release(node.pool_index)
        self._level_pool.release(level.pool_index)
        return fired

    def __len__(self) -> int:
        return len(self._index)

    def acquire_node(self) -> tuple[StopNode, int]:
        """Take a node and its slot index from the node pool."""
        return self._node_pool.acquire()

    def release_node(self, index: int) -> None:
        """Return a node slot to the node pool."""
        self._node_pool.release(index)