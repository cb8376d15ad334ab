"""Snapshot repository on top of a durable store.

The repository neither merges nor locks: every save overwrites the whole
document and the last write wins. Callers that only own part of the snapshot
(the host's window block) must load immediately before saving. This is
adequate for one UI and one host side of a single-user application, and is
not safe for several independent writers.
"""

from __future__ import annotations

import datetime as dt
import json
import logging
from collections.abc import Callable

from power_sticky.core.state import Snapshot, SnapshotFormatError, default_snapshot
from power_sticky.storage.store import DurableStore
from power_sticky.utils.time import utc_now

logger = logging.getLogger(__name__)


def dumps_snapshot(snapshot: Snapshot) -> str:
    return json.dumps(snapshot.to_dict(), indent=2)


def loads_snapshot(payload: str) -> Snapshot:
    return Snapshot.from_dict(json.loads(payload)).repaired()


class StateRepository:
    def __init__(
        self, store: DurableStore, clock: Callable[[], dt.datetime] = utc_now
    ) -> None:
        self._store = store
        self._clock = clock
        self._current: Snapshot | None = None

    @property
    def current(self) -> Snapshot | None:
        return self._current

    async def load(self) -> Snapshot:
        snapshot = await self._read()
        if snapshot is None:
            snapshot = default_snapshot(self._clock())
            await self.save(snapshot)
            return snapshot
        self._current = snapshot
        return snapshot

    async def save(self, snapshot: Snapshot) -> bool:
        await self._store.write(dumps_snapshot(snapshot))
        self._current = snapshot
        return True

    async def _read(self) -> Snapshot | None:
        try:
            payload = await self._store.read()
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read state store, using defaults: %s", exc)
            return None
        if payload is None:
            logger.info("No state store found, creating defaults")
            return None
        try:
            return loads_snapshot(payload)
        except json.JSONDecodeError as exc:
            logger.warning("State store is not valid JSON, using defaults: %s", exc)
        except SnapshotFormatError as exc:
            logger.warning("State store has an invalid shape, using defaults: %s", exc)
        return None
