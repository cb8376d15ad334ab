"""Notification payloads sent from the host to the UI."""

from __future__ import annotations

from dataclasses import dataclass

from power_sticky.utils.time import now_ts


@dataclass(frozen=True)
class WindowBlurred:
    ts: int


@dataclass(frozen=True)
class AlwaysOnTopChanged:
    ts: int
    value: bool


def window_blurred() -> WindowBlurred:
    return WindowBlurred(ts=now_ts())


def always_on_top_changed(value: bool) -> AlwaysOnTopChanged:
    return AlwaysOnTopChanged(ts=now_ts(), value=value)
