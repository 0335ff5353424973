"""
Pointer events reported by the map view.
"""

from dataclasses import dataclass
from enum import Enum


class MouseButton(Enum):
    NONE = 0
    PRIMARY = 1
    MIDDLE = 2
    SECONDARY = 3


@dataclass(frozen=True)
class MapClickEvent:
    """
    A press followed by a release on the map canvas.

    `x` and `y` are display-space pixels (origin bottom-left).
    `still_since_press` is False if the pointer moved, or the view panned or
    zoomed, between press and release.
    """
    x: float
    y: float
    button: MouseButton
    still_since_press: bool

    @property
    def screen_point(self) -> tuple[float, float]:
        return (self.x, self.y)
