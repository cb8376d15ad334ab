from __future__ import annotations

import json
import logging
from dataclasses import replace

import pytest

from conftest import FailingStore
from power_sticky.bus import topics
from power_sticky.bus.broker import InMemoryBus
from power_sticky.bus.schemas import AlwaysOnTopChanged, WindowBlurred
from power_sticky.core.notes import NoteCollection
from power_sticky.core.state import WindowState, default_snapshot
from power_sticky.host.bridge import WindowSyncBridge
from power_sticky.host.channel import HostChannel
from power_sticky.host.lifecycle import HostLifecycle
from power_sticky.host.login_items import MemoryLoginItems, XdgAutostart
from power_sticky.host.window import MIN_HEIGHT, MIN_WIDTH, Bounds, HeadlessWindow
from power_sticky.storage.repository import StateRepository, dumps_snapshot
from power_sticky.storage.store import MemoryStore


def _host(
    store=None,
    aot_supported: bool = True,
    login_items: MemoryLoginItems | None = None,
):
    bus = InMemoryBus()
    repository = StateRepository(store or MemoryStore())
    bridge = WindowSyncBridge(repository, login_items or MemoryLoginItems(), bus)

    def factory(state: WindowState) -> HeadlessWindow:
        return HeadlessWindow.from_state(state, always_on_top_supported=aot_supported)

    lifecycle = HostLifecycle(repository, bridge, bus, factory)
    return bus, repository, bridge, lifecycle


def _capture(bus: InMemoryBus, topic: str) -> list[object]:
    received: list[object] = []

    async def handler(message: object) -> None:
        received.append(message)

    bus.subscribe(topic, handler)
    return received


@pytest.mark.asyncio
async def test_geometry_write_keeps_notes_saved_by_ui() -> None:
    _bus, repository, bridge, lifecycle = _host()
    window = await lifecycle.create_window()

    # The UI saves a new note after the window was created.
    loaded = await repository.load()
    collection = NoteCollection(loaded.notes, loaded.selected_note_id).create()
    await repository.save(
        replace(loaded, notes=collection.notes, selected_note_id=collection.selected_note_id)
    )

    window.set_bounds(Bounds(x=40, y=50, width=350, height=420))
    merged = await bridge.persist_window_bounds()

    stored = await repository.load()
    assert merged == WindowState(width=350, height=420, x=40, y=50, always_on_top=True)
    assert stored.window == merged
    assert [note.id for note in stored.notes] == [note.id for note in collection.notes]
    assert stored.selected_note_id == collection.selected_note_id


@pytest.mark.asyncio
async def test_persist_without_window_is_noop() -> None:
    store = MemoryStore()
    _bus, _repository, bridge, _lifecycle = _host(store)
    assert await bridge.persist_window_bounds() is None
    assert store.writes == 0


@pytest.mark.asyncio
async def test_always_on_top_reports_actual_value() -> None:
    bus, repository, bridge, lifecycle = _host(aot_supported=False)
    received = _capture(bus, topics.ALWAYS_ON_TOP_CHANGED)
    await lifecycle.create_window()

    actual = await bridge.set_always_on_top(True)

    assert actual is False
    assert (await repository.load()).window.always_on_top is False
    assert len(received) == 1
    assert isinstance(received[0], AlwaysOnTopChanged)
    assert received[0].value is False


@pytest.mark.asyncio
async def test_tray_toggle_flips_and_persists() -> None:
    bus, repository, bridge, lifecycle = _host()
    received = _capture(bus, topics.ALWAYS_ON_TOP_CHANGED)
    window = await lifecycle.create_window()
    assert window.is_always_on_top() is True

    assert await bridge.toggle_always_on_top() is False
    assert window.is_always_on_top() is False
    assert (await repository.load()).window.always_on_top is False
    assert [message.value for message in received] == [False]


@pytest.mark.asyncio
async def test_launch_on_startup_stores_registered_value() -> None:
    _bus, repository, bridge, _lifecycle = _host()
    assert await bridge.set_launch_on_startup(True) is True
    assert (await repository.load()).settings.launch_on_startup is True

    _bus, refused_repo, refused_bridge, _lifecycle = _host(
        login_items=MemoryLoginItems(supported=False)
    )
    assert await refused_bridge.set_launch_on_startup(True) is False
    assert (await refused_repo.load()).settings.launch_on_startup is False


def test_xdg_autostart_entry(tmp_path) -> None:
    items = XdgAutostart(tmp_path / "autostart", command=["power-sticky", "notes", "list"])
    assert items.open_at_login() is False

    items.set_open_at_login(True)
    assert items.open_at_login() is True
    text = items.entry_path.read_text(encoding="utf-8")
    assert "Exec=power-sticky notes list" in text
    assert text.startswith("[Desktop Entry]\n")

    items.set_open_at_login(False)
    assert items.open_at_login() is False
    items.set_open_at_login(False)


@pytest.mark.asyncio
async def test_close_hides_until_quit_requested() -> None:
    _bus, _repository, _bridge, lifecycle = _host()
    window = await lifecycle.create_window()

    assert lifecycle.handle_close() is False
    assert window.is_visible() is False
    assert lifecycle.quitting is False

    lifecycle.request_quit()
    assert lifecycle.handle_close() is True
    assert lifecycle.quitting is True


@pytest.mark.asyncio
async def test_activate_reshows_hidden_window() -> None:
    _bus, _repository, _bridge, lifecycle = _host()
    window = await lifecycle.create_window()
    lifecycle.minimize_to_tray()
    assert window.is_visible() is False

    assert await lifecycle.activate() is window
    assert window.is_visible() is True


@pytest.mark.asyncio
async def test_activate_recreates_window_from_stored_geometry() -> None:
    _bus, repository, bridge, lifecycle = _host()
    await lifecycle.create_window()
    lifecycle.request_quit()
    lifecycle.window_closed()
    assert bridge.window is None

    stored = await repository.load()
    await repository.save(
        replace(stored, window=WindowState(width=280, height=320, x=5, y=6, always_on_top=False))
    )

    window = await lifecycle.activate()
    assert window.get_bounds() == Bounds(x=5, y=6, width=280, height=320)
    assert window.is_always_on_top() is False
    assert bridge.window is window


@pytest.mark.asyncio
async def test_blur_is_published() -> None:
    bus, _repository, _bridge, lifecycle = _host()
    received = _capture(bus, topics.WINDOW_BLUR)
    await lifecycle.handle_blur()
    assert len(received) == 1
    assert isinstance(received[0], WindowBlurred)


@pytest.mark.asyncio
async def test_failed_geometry_write_is_logged(caplog) -> None:
    store = FailingStore(payload=dumps_snapshot(default_snapshot()))
    _bus, _repository, _bridge, lifecycle = _host(store)
    await lifecycle.create_window()

    with caplog.at_level(logging.ERROR):
        await lifecycle.handle_bounds_changed()

    assert store.attempts == 1

    assert "Could not persist window geometry" in caplog.text


def test_headless_window_enforces_minimum_size() -> None:
    window = HeadlessWindow(Bounds(x=0, y=0, width=100, height=100))
    assert window.get_bounds() == Bounds(x=0, y=0, width=MIN_WIDTH, height=MIN_HEIGHT)


@pytest.mark.asyncio
async def test_host_channel_operations() -> None:
    store = MemoryStore()
    _bus, repository, bridge, lifecycle = _host(store)
    channel = HostChannel(repository, bridge, lifecycle)
    window = await lifecycle.create_window()

    snapshot = await channel.load_state()
    renamed = NoteCollection(snapshot.notes, snapshot.selected_note_id).rename(
        snapshot.notes[0].id, "Renamed"
    )
    updated = replace(snapshot, notes=renamed.notes)

    assert await channel.save_state(updated) is True
    assert store.payload == dumps_snapshot(updated)
    assert json.loads(store.payload)["notes"][0]["title"] == "Renamed"

    assert await channel.minimize_to_tray() is True
    assert window.is_visible() is False
    assert await channel.set_always_on_top(False) is False
    assert await channel.set_launch_on_startup(True) is True


@pytest.mark.asyncio
async def test_failing_subscriber_does_not_break_publisher(caplog) -> None:
    bus = InMemoryBus()
    received: list[object] = []

    async def broken(message: object) -> None:
        raise RuntimeError("boom")

    async def healthy(message: object) -> None:
        received.append(message)

    bus.subscribe(topics.WINDOW_BLUR, broken)
    bus.subscribe(topics.WINDOW_BLUR, healthy)

    with caplog.at_level(logging.ERROR):
        await bus.publish(topics.WINDOW_BLUR, "blur")

    assert received == ["blur"]
    assert "Handler for window.blur failed" in caplog.text

    bus.unsubscribe(topics.WINDOW_BLUR, healthy)
    await bus.publish(topics.WINDOW_BLUR, "again")
    assert received == ["blur"]
