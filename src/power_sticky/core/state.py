"""Persisted application state.

A ``Snapshot`` is the single aggregate written to disk. Every value here is
immutable; changes are made by building new values with
``dataclasses.replace``.
"""

from __future__ import annotations

import datetime as dt
import logging
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from power_sticky.utils.time import parse_iso, to_iso, utc_now

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled note"
WELCOME_TITLE = "Welcome"
WELCOME_CONTENT = "Power Sticky is ready.\n- [ ] Create your first task"


class SnapshotFormatError(ValueError):
    """The stored document does not have the shape of a snapshot."""


class Theme(str, Enum):
    DARK = "dark"
    YELLOW = "yellow"


@dataclass(frozen=True)
class WindowState:
    width: int = 300
    height: int = 400
    x: int | None = None
    y: int | None = None
    always_on_top: bool = True

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"width": self.width, "height": self.height}
        if self.x is not None:
            payload["x"] = self.x
        if self.y is not None:
            payload["y"] = self.y
        payload["alwaysOnTop"] = self.always_on_top
        return payload

    @classmethod
    def from_dict(cls, payload: Any) -> WindowState:
        if not isinstance(payload, dict):
            return cls()
        defaults = cls()
        return cls(
            width=_int_or(payload.get("width"), defaults.width),
            height=_int_or(payload.get("height"), defaults.height),
            x=_int_or(payload.get("x"), None),
            y=_int_or(payload.get("y"), None),
            always_on_top=_bool_or(payload.get("alwaysOnTop"), defaults.always_on_top),
        )


@dataclass(frozen=True)
class AppSettings:
    theme: Theme = Theme.DARK
    launch_on_startup: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"theme": self.theme.value, "launchOnStartup": self.launch_on_startup}

    @classmethod
    def from_dict(cls, payload: Any) -> AppSettings:
        if not isinstance(payload, dict):
            return cls()
        try:
            theme = Theme(payload.get("theme", Theme.DARK.value))
        except ValueError:
            logger.info("Unknown theme %r, using dark", payload.get("theme"))
            theme = Theme.DARK
        return cls(
            theme=theme,
            launch_on_startup=_bool_or(payload.get("launchOnStartup"), False),
        )


@dataclass(frozen=True)
class Note:
    id: str
    title: str
    content: str
    pinned: bool
    created_at: dt.datetime
    updated_at: dt.datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "pinned": self.pinned,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, payload: Any) -> Note:
        if not isinstance(payload, dict):
            raise SnapshotFormatError("note entries must be objects")
        note_id = payload.get("id")
        if not isinstance(note_id, str) or not note_id:
            raise SnapshotFormatError("note id must be a non-empty string")
        created_at = _timestamp(payload.get("createdAt"))
        updated_at = _timestamp(payload.get("updatedAt"))
        if created_at is None:
            created_at = updated_at or utc_now()
        if updated_at is None or updated_at < created_at:
            updated_at = created_at
        return cls(
            id=note_id,
            title=_str_or(payload.get("title"), DEFAULT_TITLE),
            content=_str_or(payload.get("content"), ""),
            pinned=_bool_or(payload.get("pinned"), False),
            created_at=created_at,
            updated_at=updated_at,
        )


@dataclass(frozen=True)
class Snapshot:
    window: WindowState = field(default_factory=WindowState)
    selected_note_id: str | None = None
    notes: tuple[Note, ...] = ()
    settings: AppSettings = field(default_factory=AppSettings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "window": self.window.to_dict(),
            "selectedNoteId": self.selected_note_id,
            "notes": [note.to_dict() for note in self.notes],
            "settings": self.settings.to_dict(),
        }

    @classmethod
    def from_dict(cls, payload: Any) -> Snapshot:
        if not isinstance(payload, dict):
            raise SnapshotFormatError("snapshot must be an object")
        raw_notes = payload.get("notes", [])
        if raw_notes is None:
            raw_notes = []
        if not isinstance(raw_notes, list):
            raise SnapshotFormatError("notes must be a list")
        selected = payload.get("selectedNoteId")
        return cls(
            window=WindowState.from_dict(payload.get("window")),
            selected_note_id=selected if isinstance(selected, str) else None,
            notes=tuple(Note.from_dict(item) for item in raw_notes),
            settings=AppSettings.from_dict(payload.get("settings")),
        )

    def repaired(self) -> Snapshot:
        """Drop duplicate note ids and point the selection at an existing note."""
        seen: set[str] = set()
        notes: list[Note] = []
        for note in self.notes:
            if note.id in seen:
                logger.warning("Dropping note with duplicate id %s", note.id)
                continue
            seen.add(note.id)
            notes.append(note)

        selected = self.selected_note_id
        if selected not in seen:
            selected = notes[0].id if notes else None
        if selected == self.selected_note_id and len(notes) == len(self.notes):
            return self
        return replace(self, notes=tuple(notes), selected_note_id=selected)


def new_note_id() -> str:
    return f"note_{uuid.uuid4().hex}"


def default_snapshot(now: dt.datetime | None = None) -> Snapshot:
    created = now or utc_now()
    welcome = Note(
        id=new_note_id(),
        title=WELCOME_TITLE,
        content=WELCOME_CONTENT,
        pinned=True,
        created_at=created,
        updated_at=created,
    )
    return Snapshot(
        window=WindowState(),
        selected_note_id=welcome.id,
        notes=(welcome,),
        settings=AppSettings(),
    )


def _timestamp(value: Any) -> dt.datetime | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise SnapshotFormatError(f"invalid timestamp: {value!r}")
    try:
        return parse_iso(value)
    except (ValueError, OverflowError) as exc:
        raise SnapshotFormatError(f"invalid timestamp: {value!r}") from exc


def _int_or(value: Any, default: int | None) -> int | None:
    # bool is an int subclass; JSON numbers may also arrive as floats
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return default


def _bool_or(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _str_or(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default
