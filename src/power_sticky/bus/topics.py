"""Host to UI notification topics."""

from __future__ import annotations

WINDOW_BLUR = "window.blur"
ALWAYS_ON_TOP_CHANGED = "window.always_on_top_changed"
