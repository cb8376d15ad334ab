"""Launch-at-login registration."""

from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

DESKTOP_ENTRY_NAME = "power-sticky.desktop"


class LoginItems(Protocol):
    def set_open_at_login(self, enabled: bool) -> None: ...

    def open_at_login(self) -> bool: ...


class MemoryLoginItems:
    def __init__(self, enabled: bool = False, supported: bool = True) -> None:
        self._enabled = enabled
        self._supported = supported

    def set_open_at_login(self, enabled: bool) -> None:
        if self._supported:
            self._enabled = enabled

    def open_at_login(self) -> bool:
        return self._enabled


class XdgAutostart:
    """freedesktop.org autostart entry in ``~/.config/autostart``."""

    def __init__(self, autostart_dir: Path, command: list[str] | None = None) -> None:
        self._entry = autostart_dir / DESKTOP_ENTRY_NAME
        self._command = command or ["power-sticky"]

    @property
    def entry_path(self) -> Path:
        return self._entry

    def set_open_at_login(self, enabled: bool) -> None:
        if not enabled:
            self._entry.unlink(missing_ok=True)
            logger.info("Removed autostart entry %s", self._entry)
            return
        self._entry.parent.mkdir(parents=True, exist_ok=True)
        self._entry.write_text(self._desktop_entry(), encoding="utf-8")
        logger.info("Wrote autostart entry %s", self._entry)

    def open_at_login(self) -> bool:
        return self._entry.exists()

    def _desktop_entry(self) -> str:
        return "\n".join(
            [
                "[Desktop Entry]",
                "Type=Application",
                "Name=Power Sticky",
                f"Exec={shlex.join(self._command)}",
                "X-GNOME-Autostart-enabled=true",
                "",
            ]
        )
