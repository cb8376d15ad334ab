from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from power_sticky.core.settings import Settings


async def settle(rounds: int = 20) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


class ManualClock:
    """Stands in for ``asyncio.sleep``; sleepers wake only on ``advance``."""

    def __init__(self) -> None:
        self.sleeps: list[float] = []
        self._waiters: list[asyncio.Future[None]] = []

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        await waiter

    @property
    def sleeping(self) -> int:
        return sum(1 for waiter in self._waiters if not waiter.done())

    async def advance(self) -> None:
        await settle()
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)
        await settle()


class FailingStore:
    def __init__(self, payload: str | None = None, failures: int = 1_000) -> None:
        self.payload = payload
        self.failures = failures
        self.attempts = 0

    async def read(self) -> str | None:
        return self.payload

    async def write(self, payload: str) -> None:
        self.attempts += 1
        if self.attempts <= self.failures:
            raise OSError("disk full")
        self.payload = payload


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        data_dir=tmp_path / "data",
        store_file="power-sticky.json",
        save_debounce_s=0.5,
        save_retries=1,
        log_level="WARNING",
        autostart_dir=tmp_path / "autostart",
    )
