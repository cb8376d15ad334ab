"""Host side of the boundary channel."""

from __future__ import annotations

from power_sticky.core.state import Snapshot
from power_sticky.host.bridge import WindowSyncBridge
from power_sticky.host.lifecycle import HostLifecycle
from power_sticky.storage.repository import StateRepository


class HostChannel:
    def __init__(
        self,
        repository: StateRepository,
        bridge: WindowSyncBridge,
        lifecycle: HostLifecycle,
    ) -> None:
        self._repository = repository
        self._bridge = bridge
        self._lifecycle = lifecycle

    async def load_state(self) -> Snapshot:
        return await self._repository.load()

    async def save_state(self, snapshot: Snapshot) -> bool:
        return await self._repository.save(snapshot)

    async def set_always_on_top(self, value: bool) -> bool:
        return await self._bridge.set_always_on_top(value)

    async def minimize_to_tray(self) -> bool:
        self._lifecycle.minimize_to_tray()
        return True

    async def set_launch_on_startup(self, enabled: bool) -> bool:
        return await self._bridge.set_launch_on_startup(enabled)
