from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Shared(Generic[T]):
    """Read-only handle several owners hold on to the same value."""

    value: T

    def get(self) -> T:
        return self.value


@dataclass
class Cell(Generic[T]):
    value: T


class Guarded(Generic[T]):
    """Value shared between tasks, reachable only while holding its lock."""

    def __init__(self, value: T):
        self._cell = Cell(value)
        self._lock = asyncio.Lock()

    def locked(self) -> bool:
        return self._lock.locked()

    @asynccontextmanager
    async def borrow(self) -> AsyncIterator[T]:
        async with self._lock:
            yield self._cell.value

    @asynccontextmanager
    async def borrow_mut(self) -> AsyncIterator[Cell[T]]:
        """Like borrow(), but yields the cell so the value can be replaced."""
        async with self._lock:
            yield self._cell
