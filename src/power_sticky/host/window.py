"""Window controller interface and the headless implementation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from power_sticky.core.state import WindowState

MIN_WIDTH = 260
MIN_HEIGHT = 300


@dataclass(frozen=True)
class Bounds:
    x: int
    y: int
    width: int
    height: int


class WindowController(Protocol):
    def get_bounds(self) -> Bounds: ...

    def set_bounds(self, bounds: Bounds) -> None: ...

    def set_always_on_top(self, value: bool) -> None: ...

    def is_always_on_top(self) -> bool: ...

    def show(self) -> None: ...

    def hide(self) -> None: ...

    def is_visible(self) -> bool: ...


class HeadlessWindow:
    """Window with no on-screen presence, used by the CLI and in tests.

    ``always_on_top_supported=False`` models a platform that ignores
    always-on-top requests.
    """

    def __init__(
        self,
        bounds: Bounds,
        always_on_top: bool = True,
        always_on_top_supported: bool = True,
    ) -> None:
        self._bounds = _clamp(bounds)
        self._supported = always_on_top_supported
        self._always_on_top = always_on_top and always_on_top_supported
        self._visible = True

    @classmethod
    def from_state(
        cls, state: WindowState, always_on_top_supported: bool = True
    ) -> HeadlessWindow:
        # No stored position: the platform would choose, headless uses the origin.
        bounds = Bounds(
            x=state.x if state.x is not None else 0,
            y=state.y if state.y is not None else 0,
            width=state.width,
            height=state.height,
        )
        return cls(bounds, state.always_on_top, always_on_top_supported)

    def get_bounds(self) -> Bounds:
        return self._bounds

    def set_bounds(self, bounds: Bounds) -> None:
        self._bounds = _clamp(bounds)

    def set_always_on_top(self, value: bool) -> None:
        if self._supported:
            self._always_on_top = value

    def is_always_on_top(self) -> bool:
        return self._always_on_top

    def show(self) -> None:
        self._visible = True

    def hide(self) -> None:
        self._visible = False

    def is_visible(self) -> bool:
        return self._visible


def _clamp(bounds: Bounds) -> Bounds:
    return Bounds(
        x=bounds.x,
        y=bounds.y,
        width=max(bounds.width, MIN_WIDTH),
        height=max(bounds.height, MIN_HEIGHT),
    )
