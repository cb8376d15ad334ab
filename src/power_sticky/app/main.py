"""Compose the store, host and UI session."""

from __future__ import annotations

from dataclasses import dataclass

from power_sticky.bus.broker import InMemoryBus
from power_sticky.core.notes import Confirm
from power_sticky.core.settings import Settings
from power_sticky.host.bridge import WindowSyncBridge
from power_sticky.host.channel import HostChannel
from power_sticky.host.lifecycle import HostLifecycle, WindowFactory
from power_sticky.host.login_items import LoginItems, XdgAutostart
from power_sticky.host.window import HeadlessWindow
from power_sticky.storage.repository import StateRepository
from power_sticky.storage.store import DurableStore, JsonFileStore
from power_sticky.ui.session import NoteSession


@dataclass
class Host:
    bus: InMemoryBus
    repository: StateRepository
    bridge: WindowSyncBridge
    lifecycle: HostLifecycle
    channel: HostChannel


def build_host(
    settings: Settings,
    store: DurableStore | None = None,
    login_items: LoginItems | None = None,
    window_factory: WindowFactory = HeadlessWindow.from_state,
) -> Host:
    bus = InMemoryBus()
    repository = StateRepository(store or JsonFileStore(settings.store_path))
    bridge = WindowSyncBridge(
        repository, login_items or XdgAutostart(settings.autostart_dir), bus
    )
    lifecycle = HostLifecycle(repository, bridge, bus, window_factory)
    channel = HostChannel(repository, bridge, lifecycle)
    return Host(
        bus=bus,
        repository=repository,
        bridge=bridge,
        lifecycle=lifecycle,
        channel=channel,
    )


async def open_session(host: Host, settings: Settings, confirm: Confirm) -> NoteSession:
    """Bring up the window, then a UI session attached to it."""
    await host.lifecycle.activate()
    session = NoteSession(
        host.channel,
        host.bus,
        confirm,
        delay_s=settings.save_debounce_s,
        retries=settings.save_retries,
    )
    await session.start()
    return session


async def shutdown(host: Host, session: NoteSession) -> bool:
    """Explicit quit: flush the UI, then let the window close."""
    saved = await session.close()
    host.lifecycle.request_quit()
    if host.lifecycle.handle_close():
        host.lifecycle.window_closed()
    return saved
