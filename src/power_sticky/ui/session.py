"""UI-side state: a local snapshot copy kept durable through the host channel."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace

from power_sticky.bus import topics
from power_sticky.bus.broker import EventBus
from power_sticky.bus.channel import BoundaryChannel
from power_sticky.bus.schemas import AlwaysOnTopChanged
from power_sticky.core.notes import Confirm, Direction, NoteCollection
from power_sticky.core.persistence import SAVE_DEBOUNCE_S, SaveScheduler, SaveStatus, Sleep
from power_sticky.core.state import Note, Snapshot, Theme

logger = logging.getLogger(__name__)


class NoteSession:
    """Applies user edits to a local snapshot and saves it on a debounce.

    Saves always send the full local snapshot, including the window block as
    last loaded or reconciled.
    """

    def __init__(
        self,
        channel: BoundaryChannel,
        bus: EventBus,
        confirm: Confirm,
        delay_s: float = SAVE_DEBOUNCE_S,
        retries: int = 1,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._channel = channel
        self._bus = bus
        self._confirm = confirm
        self._snapshot: Snapshot | None = None
        self._scheduler = SaveScheduler(
            self._save, delay_s=delay_s, retries=retries, sleep=sleep
        )

    @property
    def snapshot(self) -> Snapshot:
        if self._snapshot is None:
            raise RuntimeError("Session has not been started")
        return self._snapshot

    @property
    def notes(self) -> NoteCollection:
        snapshot = self.snapshot
        return NoteCollection(snapshot.notes, snapshot.selected_note_id)

    @property
    def selected(self) -> Note | None:
        return self.notes.selected

    @property
    def save_status(self) -> SaveStatus:
        return self._scheduler.status

    async def start(self) -> Snapshot:
        self._snapshot = await self._channel.load_state()
        self._bus.subscribe(topics.WINDOW_BLUR, self._on_window_blur)
        self._bus.subscribe(topics.ALWAYS_ON_TOP_CHANGED, self._on_always_on_top_changed)
        return self._snapshot

    async def close(self) -> bool:
        self._bus.unsubscribe(topics.WINDOW_BLUR, self._on_window_blur)
        self._bus.unsubscribe(topics.ALWAYS_ON_TOP_CHANGED, self._on_always_on_top_changed)
        if self._snapshot is None:
            return True
        return await self._scheduler.aclose()

    async def flush(self) -> bool:
        if self._snapshot is None:
            return True
        return await self._scheduler.flush()

    def create_note(self) -> Note:
        collection = self.notes.create()
        self._apply_notes(collection)
        return collection.notes[0]

    def rename_note(self, title: str, note_id: str | None = None) -> None:
        target = self._target(note_id)
        if target is not None:
            self._apply_notes(self.notes.rename(target, title))

    def update_content(self, text: str, note_id: str | None = None) -> None:
        target = self._target(note_id)
        if target is not None:
            self._apply_notes(self.notes.update_content(target, text))

    def toggle_pin(self, note_id: str | None = None) -> None:
        target = self._target(note_id)
        if target is not None:
            self._apply_notes(self.notes.toggle_pin(target))

    def reorder_note(self, direction: Direction, note_id: str | None = None) -> None:
        target = self._target(note_id)
        if target is not None:
            self._apply_notes(self.notes.reorder(target, direction))

    def select_note(self, note_id: str) -> None:
        self._apply_notes(self.notes.select(note_id))

    async def delete_note(self, note_id: str | None = None) -> bool:
        collection = self.notes
        updated = await collection.delete(self._target(note_id), self._confirm)
        if updated is collection:
            return False
        self._apply_notes(updated)
        return True

    def search(self, query: str) -> list[Note]:
        return self.notes.search(query)

    def set_theme(self, theme: Theme | str) -> None:
        value = Theme(theme)
        snapshot = self.snapshot
        self._apply(replace(snapshot, settings=replace(snapshot.settings, theme=value)))

    async def toggle_always_on_top(self) -> bool:
        requested = not self.snapshot.window.always_on_top
        actual = await self._channel.set_always_on_top(requested)
        self._reconcile_always_on_top(actual)
        return actual

    async def toggle_launch_on_startup(self) -> bool:
        return await self.set_launch_on_startup(not self.snapshot.settings.launch_on_startup)

    async def set_launch_on_startup(self, enabled: bool) -> bool:
        actual = await self._channel.set_launch_on_startup(enabled)
        snapshot = self.snapshot
        if snapshot.settings.launch_on_startup != actual:
            settings = replace(snapshot.settings, launch_on_startup=actual)
            self._apply(replace(snapshot, settings=settings))
        return actual

    async def set_always_on_top(self, value: bool) -> bool:
        actual = await self._channel.set_always_on_top(value)
        self._reconcile_always_on_top(actual)
        return actual

    async def minimize_to_tray(self) -> bool:
        # The window may stay hidden indefinitely; make the edits durable first.
        await self.flush()
        return await self._channel.minimize_to_tray()

    def _target(self, note_id: str | None) -> str | None:
        if note_id is not None:
            return note_id
        selected = self.selected
        return selected.id if selected else None

    def _apply_notes(self, collection: NoteCollection) -> None:
        snapshot = self.snapshot
        if (
            collection.notes is snapshot.notes
            and collection.selected_note_id == snapshot.selected_note_id
        ):
            return
        self._apply(
            replace(
                snapshot,
                notes=collection.notes,
                selected_note_id=collection.selected_note_id,
            )
        )

    def _apply(self, snapshot: Snapshot) -> None:
        self._snapshot = snapshot
        self._scheduler.schedule()

    def _reconcile_always_on_top(self, value: bool) -> None:
        snapshot = self.snapshot
        if snapshot.window.always_on_top == value:
            return
        self._apply(replace(snapshot, window=replace(snapshot.window, always_on_top=value)))

    async def _save(self) -> bool:
        return await self._channel.save_state(self.snapshot)

    async def _on_window_blur(self, message: object) -> None:
        logger.debug("Window lost focus, flushing")
        await self.flush()

    async def _on_always_on_top_changed(self, message: object) -> None:
        if isinstance(message, AlwaysOnTopChanged) and self._snapshot is not None:
            self._reconcile_always_on_top(message.value)
