"""Debounced snapshot persistence."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum

logger = logging.getLogger(__name__)

SAVE_DEBOUNCE_S = 0.5

Save = Callable[[], Awaitable[object]]
Sleep = Callable[[float], Awaitable[None]]


class SaveStatus(str, Enum):
    SAVED = "saved"
    PENDING = "pending"
    UNSAVED = "unsaved"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    SaveStatus.SAVED: "Saved ✓",
    SaveStatus.PENDING: "Saving…",
    SaveStatus.UNSAVED: "Unsaved",
}


class SaveScheduler:
    """Coalesces bursts of mutations into one write per quiet period.

    ``save`` writes whatever the owner's latest state is when it runs, so a
    burst of N mutations produces one write holding the Nth state. Writes are
    serialized; ``flush`` waits for a write already in progress.
    """

    def __init__(
        self,
        save: Save,
        delay_s: float = SAVE_DEBOUNCE_S,
        retries: int = 1,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._save = save
        self._delay_s = delay_s
        self._retries = retries
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._timer: asyncio.Task[None] | None = None
        self._dirty = False
        self._generation = 0
        self._status = SaveStatus.SAVED

    @property
    def status(self) -> SaveStatus:
        return self._status

    @property
    def pending(self) -> bool:
        return self._dirty

    def schedule(self) -> None:
        self._dirty = True
        self._generation += 1
        self._status = SaveStatus.PENDING
        self._cancel_timer()
        self._timer = asyncio.create_task(self._write_later())

    async def flush(self) -> bool:
        self._cancel_timer()
        async with self._lock:
            if not self._dirty:
                return True
            return await self._write()

    async def aclose(self) -> bool:
        return await self.flush()

    async def _write_later(self) -> None:
        await self._sleep(self._delay_s)
        # Once the quiet period is over a newer schedule() must not cancel the write.
        self._timer = None
        async with self._lock:
            if self._dirty:
                await self._write()

    async def _write(self) -> bool:
        generation = self._generation
        self._dirty = False
        attempts = self._retries + 1
        for attempt in range(1, attempts + 1):
            try:
                await self._save()
            except asyncio.CancelledError:
                self._dirty = True
                raise
            except OSError as exc:
                if attempt < attempts:
                    logger.warning("Save attempt %d failed, retrying: %s", attempt, exc)
                    continue
                logger.error("Save failed after %d attempt(s): %s", attempts, exc)
                return self._failed(generation)
            except Exception:
                logger.exception("Save failed")
                return self._failed(generation)
            break
        if generation == self._generation:
            self._status = SaveStatus.SAVED
        logger.debug("Snapshot saved (generation %d)", generation)
        return True

    def _failed(self, generation: int) -> bool:
        self._dirty = True
        if generation == self._generation:
            self._status = SaveStatus.UNSAVED
        return False

    def _cancel_timer(self) -> None:
        timer = self._timer
        self._timer = None
        if timer is not None and not timer.done():
            timer.cancel()
