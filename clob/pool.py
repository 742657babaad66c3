"""Fixed-capacity object pool with slot indices."""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

__all__ = ["PoolExhaustedError", "Pool"]

T = TypeVar("T")


class PoolExhaustedError(RuntimeError):
    """Raised by :meth:`Pool.acquire` when every slot is in use."""

    def __init__(self) -> None:
        super().__init__("pool exhausted")


class Pool(Generic[T]):
    """A pool of ``capacity`` slots, each filled by ``factory`` on acquire.

    Slots are handed out lowest index first and reused last-in first-out.
    The caller keeps the index returned by :meth:`acquire` and passes it
    back to :meth:`release`. Not thread-safe: one owner uses the pool.
    """

    def __init__(self, capacity: int, factory: Callable[[], T]) -> None:
        if capacity < 0:
            raise ValueError(f"capacity must not be negative, got {capacity}")
        self._capacity = capacity
        self._factory = factory
        self._store: list[T | None] = [None] * capacity
        self._free: list[int] = list(range(capacity - 1, -1, -1))
        self._in_use: set[int] = set()

    def acquire(self) -> tuple[T, int]:
        """Return a freshly made object and its slot index."""
        if not self._free:
            raise PoolExhaustedError()
        index = self._free.pop()
        item = self._factory()
        self._store[index] = item
        self._in_use.add(index)
        return item, index

    def release(self, index: int) -> None:
        """Return the slot ``index`` to the pool."""
        if index not in self._in_use:
            raise ValueError(f"slot {index} is not in use")
        self._in_use.remove(index)
        self._store[index] = None
        self._free.append(index)

    def __len__(self) -> int:
        """Number of slots currently in use."""
        return self._capacity - len(self._free)

    @property
    def capacity(self) -> int:
        """Total number of slots."""
        return self._capacity