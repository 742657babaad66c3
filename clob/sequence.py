"""Monotonic sequence counter."""

from __future__ import annotations

__all__ = ["Counter"]

_MASK = (1 << 64) - 1


class Counter:
    """Unsigned 64-bit monotonic counter whose first :meth:`next` is ``start``.

    Not thread-safe: one owner uses the counter.
    """

    def __init__(self, start: int = 1) -> None:
        self._n = (start - 1) & _MASK

    def next(self) -> int:
        """Advance the counter and return the new value."""
        self._n = (self._n + 1) & _MASK
        return self._n

    def peek(self) -> int:
        """Return the current value without advancing."""
        return self._n

    def reset(self, n: int) -> None:
        """Set the current value to ``n``; the next call returns ``n + 1``."""
        self._n = n & _MASK