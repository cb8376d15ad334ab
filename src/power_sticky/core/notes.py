"""Note collection operations.

Every operation returns a new ``NoteCollection``. Operations that name a note
id missing from the collection return the collection unchanged.
"""

from __future__ import annotations

import datetime as dt
import inspect
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from typing import Literal

from power_sticky.core.state import DEFAULT_TITLE, Note, new_note_id
from power_sticky.utils.time import utc_now

Direction = Literal["up", "down"]
Confirm = Callable[[str], bool | Awaitable[bool]]

DELETE_PROMPT = "Delete this note permanently?"
TITLE_MAX_LENGTH = 40

_CHECKLIST_RE = re.compile(r"^\s*- \[( |x)\]\s")
_BULLET_RE = re.compile(r"^\s*-\s+")


def auto_continue(next_value: str, prev_value: str) -> str:
    """Continue a checklist or bullet list when the user presses enter.

    ``prev_value`` is the content before the edit; its last line is the line
    the new line break was typed after.
    """
    if not next_value.endswith("\n"):
        return next_value
    prev_line = prev_value.split("\n")[-1]
    checklist = _CHECKLIST_RE.match(prev_line)
    if checklist:
        return next_value + checklist.group(0).replace("[x]", "[ ]")
    bullet = _BULLET_RE.match(prev_line)
    if bullet:
        return next_value + bullet.group(0)
    return next_value


def derive_title(content: str) -> str:
    for line in content.split("\n"):
        stripped = line.strip()
        if stripped:
            return stripped[:TITLE_MAX_LENGTH]
    return DEFAULT_TITLE


@dataclass(frozen=True)
class NoteCollection:
    notes: tuple[Note, ...] = ()
    selected_note_id: str | None = None

    @property
    def selected(self) -> Note | None:
        for note in self.notes:
            if note.id == self.selected_note_id:
                return note
        return self.notes[0] if self.notes else None

    def get(self, note_id: str | None) -> Note | None:
        for note in self.notes:
            if note.id == note_id:
                return note
        return None

    def create(self, now: dt.datetime | None = None) -> NoteCollection:
        timestamp = now or utc_now()
        note = Note(
            id=new_note_id(),
            title=DEFAULT_TITLE,
            content="",
            pinned=False,
            created_at=timestamp,
            updated_at=timestamp,
        )
        return NoteCollection(notes=(note, *self.notes), selected_note_id=note.id)

    def rename(self, note_id: str, title: str) -> NoteCollection:
        return self._update(note_id, lambda note: replace(note, title=title))

    def update_content(
        self, note_id: str, text: str, now: dt.datetime | None = None
    ) -> NoteCollection:
        timestamp = now or utc_now()

        def _apply(note: Note) -> Note:
            content = auto_continue(text, note.content)
            title = derive_title(content) if note.title == DEFAULT_TITLE else note.title
            return replace(
                note,
                content=content,
                title=title,
                updated_at=max(timestamp, note.created_at),
            )

        return self._update(note_id, _apply)

    def toggle_pin(self, note_id: str) -> NoteCollection:
        return self._update(note_id, lambda note: replace(note, pinned=not note.pinned))

    async def delete(self, note_id: str | None, confirm: Confirm) -> NoteCollection:
        if self.get(note_id) is None:
            return self
        answer = confirm(DELETE_PROMPT)
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer:
            return self
        remaining = tuple(note for note in self.notes if note.id != note_id)
        return NoteCollection(
            notes=remaining,
            selected_note_id=remaining[0].id if remaining else None,
        )

    def reorder(self, note_id: str, direction: Direction) -> NoteCollection:
        if direction not in ("up", "down"):
            raise ValueError(f"Invalid direction: {direction}")
        index = self._index(note_id)
        if index is None:
            return self
        target = index - 1 if direction == "up" else index + 1
        if target < 0 or target >= len(self.notes):
            return self
        notes = list(self.notes)
        notes[index], notes[target] = notes[target], notes[index]
        return replace(self, notes=tuple(notes))

    def select(self, note_id: str) -> NoteCollection:
        if self.get(note_id) is None:
            return self
        return replace(self, selected_note_id=note_id)

    def search(self, query: str) -> list[Note]:
        """Pinned-first display order, filtered by title or content."""
        ordered = sorted(self.notes, key=lambda note: not note.pinned)
        needle = query.strip().lower()
        if not needle:
            return ordered
        return [
            note
            for note in ordered
            if needle in note.title.lower() or needle in note.content.lower()
        ]

    def _index(self, note_id: str | None) -> int | None:
        for index, note in enumerate(self.notes):
            if note.id == note_id:
                return index
        return None

    def _update(
        self, note_id: str, change: Callable[[Note], Note]
    ) -> NoteCollection:
        index = self._index(note_id)
        if index is None:
            return self
        notes = list(self.notes)
        notes[index] = change(notes[index])
        return replace(self, notes=tuple(notes))
