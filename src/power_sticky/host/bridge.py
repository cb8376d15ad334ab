"""Keeps the live window and the persisted snapshot in step.

The host only owns the ``window`` block and ``settings.launch_on_startup``.
Each write re-loads the snapshot first so note edits saved by the UI are not
overwritten with stale ones.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace

from power_sticky.bus import topics
from power_sticky.bus.broker import EventBus
from power_sticky.bus.schemas import always_on_top_changed
from power_sticky.core.state import WindowState
from power_sticky.host.login_items import LoginItems
from power_sticky.host.window import WindowController
from power_sticky.storage.repository import StateRepository

logger = logging.getLogger(__name__)


class WindowSyncBridge:
    def __init__(
        self, repository: StateRepository, login_items: LoginItems, bus: EventBus
    ) -> None:
        self._repository = repository
        self._login_items = login_items
        self._bus = bus
        self._window: WindowController | None = None

    @property
    def window(self) -> WindowController | None:
        return self._window

    def attach(self, window: WindowController) -> None:
        self._window = window

    def detach(self) -> None:
        self._window = None

    async def persist_window_bounds(self) -> WindowState | None:
        window = self._window
        if window is None:
            return None
        state = await self._repository.load()
        bounds = window.get_bounds()
        merged = replace(
            state.window,
            width=bounds.width,
            height=bounds.height,
            x=bounds.x,
            y=bounds.y,
            always_on_top=window.is_always_on_top(),
        )
        await self._repository.save(replace(state, window=merged))
        return merged

    async def set_always_on_top(self, value: bool) -> bool:
        window = self._window
        if window is None:
            raise RuntimeError("No window is attached")
        window.set_always_on_top(bool(value))
        await self.persist_window_bounds()
        actual = window.is_always_on_top()
        if actual != bool(value):
            logger.info("Platform kept always-on-top at %s", actual)
        await self._bus.publish(topics.ALWAYS_ON_TOP_CHANGED, always_on_top_changed(actual))
        return actual

    async def toggle_always_on_top(self) -> bool:
        window = self._window
        if window is None:
            raise RuntimeError("No window is attached")
        return await self.set_always_on_top(not window.is_always_on_top())

    async def set_launch_on_startup(self, enabled: bool) -> bool:
        await asyncio.to_thread(self._login_items.set_open_at_login, bool(enabled))
        registered = await asyncio.to_thread(self._login_items.open_at_login)
        state = await self._repository.load()
        settings = replace(state.settings, launch_on_startup=registered)
        await self._repository.save(replace(state, settings=settings))
        return settings.launch_on_startup
