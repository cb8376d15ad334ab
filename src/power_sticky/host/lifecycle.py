"""Host process lifecycle: window creation, close-to-tray, activation."""

from __future__ import annotations

import logging
from collections.abc import Callable

from power_sticky.bus import topics
from power_sticky.bus.broker import EventBus
from power_sticky.bus.schemas import window_blurred
from power_sticky.core.state import WindowState
from power_sticky.host.bridge import WindowSyncBridge
from power_sticky.host.window import WindowController
from power_sticky.storage.repository import StateRepository

logger = logging.getLogger(__name__)

WindowFactory = Callable[[WindowState], WindowController]


class HostLifecycle:
    def __init__(
        self,
        repository: StateRepository,
        bridge: WindowSyncBridge,
        bus: EventBus,
        window_factory: WindowFactory,
    ) -> None:
        self._repository = repository
        self._bridge = bridge
        self._bus = bus
        self._window_factory = window_factory
        self._window: WindowController | None = None
        self._quitting = False

    @property
    def window(self) -> WindowController | None:
        return self._window

    @property
    def quitting(self) -> bool:
        return self._quitting

    async def create_window(self) -> WindowController:
        state = await self._repository.load()
        window = self._window_factory(state.window)
        self._window = window
        self._bridge.attach(window)
        logger.debug("Window created from stored geometry %s", state.window)
        return window

    def request_quit(self) -> None:
        logger.info("Quit requested")
        self._quitting = True

    def handle_close(self) -> bool:
        """Return whether the close may proceed; otherwise the window is hidden."""
        if self._quitting or self._window is None:
            return True
        logger.debug("Close intercepted, hiding to tray")
        self._window.hide()
        return False

    def window_closed(self) -> None:
        self._window = None
        self._bridge.detach()

    async def activate(self) -> WindowController:
        if self._window is None:
            return await self.create_window()
        self._window.show()
        return self._window

    def minimize_to_tray(self) -> None:
        if self._window is not None:
            self._window.hide()

    async def handle_blur(self) -> None:
        await self._bus.publish(topics.WINDOW_BLUR, window_blurred())

    async def handle_bounds_changed(self) -> None:
        try:
            await self._bridge.persist_window_bounds()
        except OSError:
            logger.exception("Could not persist window geometry")
