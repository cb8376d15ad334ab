"""Request/response contract between the UI session and the host."""

from __future__ import annotations

from typing import Protocol

from power_sticky.core.state import Snapshot


class BoundaryChannel(Protocol):
    async def load_state(self) -> Snapshot: ...

    async def save_state(self, snapshot: Snapshot) -> bool: ...

    async def set_always_on_top(self, value: bool) -> bool: ...

    async def minimize_to_tray(self) -> bool: ...

    async def set_launch_on_startup(self, enabled: bool) -> bool: ...
