import asyncio

import pytest

from src.core.shared import Guarded, Shared


def test_shared_returns_same_object():
    data = {"a": 1}
    shared = Shared(data)
    assert shared.get() is data


@pytest.mark.asyncio
async def test_borrow_holds_lock_for_scope():
    guarded = Guarded([1, 2])
    async with guarded.borrow() as value:
        assert guarded.locked()
        assert value == [1, 2]
    assert not guarded.locked()


@pytest.mark.asyncio
async def test_borrow_releases_on_error():
    guarded = Guarded({})
    with pytest.raises(RuntimeError):
        async with guarded.borrow():
            raise RuntimeError("boom")
    assert not guarded.locked()


@pytest.mark.asyncio
async def test_borrow_mut_replaces_value():
    guarded = Guarded(1)
    async with guarded.borrow_mut() as cell:
        cell.value = 2
    async with guarded.borrow() as value:
        assert value == 2


@pytest.mark.asyncio
async def test_borrows_are_exclusive():
    guarded = Guarded([])

    async def append(n: int):
        async with guarded.borrow() as value:
            value.append(n)
            await asyncio.sleep(0)
            value.append(n)

    await asyncio.gather(append(1), append(2))

    async with guarded.borrow() as value:
        assert value == [1, 1, 2, 2]
