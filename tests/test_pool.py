from dataclasses import dataclass

import pytest

from clob.pool import Pool, PoolExhaustedError


@dataclass
class _Item:
    pool_index: int = 0
    value: int = 0


def test_acquire_release():
    pool = Pool(4, _Item)
    assert len(pool) == 0

    item, idx = pool.acquire()
    item.pool_index = idx
    item.value = 42
    assert len(pool) == 1

    pool.release(idx)
    assert len(pool) == 0


def test_zeroed_on_acquire():
    pool = Pool(4, _Item)
    item, idx = pool.acquire()
    item.pool_index = idx
    item.value = 99
    pool.release(idx)

    item2, idx2 = pool.acquire()
    assert idx2 == idx
    assert item2.value == 0
    pool.release(idx2)


def test_exhaustion():
    pool = Pool(2, _Item)
    pool.acquire()
    pool.acquire()
    with pytest.raises(PoolExhaustedError):
        pool.acquire()


def test_large_acquire_release_cycle():
    capacity = 1000
    pool = Pool(capacity, _Item)
    indices = []
    for _ in range(capacity):
        item, idx = pool.acquire()
        item.pool_index = idx
        indices.append(idx)
    assert len(pool) == capacity
    assert sorted(indices) == list(range(capacity))

    for idx in indices:
        pool.release(idx)
    assert len(pool) == 0


def test_first_slot_is_zero_and_lifo_reuse():
    pool = Pool(3, _Item)
    _, first = pool.acquire()
    _, second = pool.acquire()
    assert (first, second) == (0, 1)
    pool.release(first)
    _, again = pool.acquire()
    assert again == first


def test_capacity():
    assert Pool(7, _Item).capacity == 7


def test_release_unused_slot_raises():
    pool = Pool(2, _Item)
    with pytest.raises(ValueError):
        pool.release(0)


def test_double_release_raises():
    pool = Pool(2, _Item)
    _, idx = pool.acquire()
    pool.release(idx)
    with pytest.raises(ValueError):
        pool.release(idx)