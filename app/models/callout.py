"""
Anchored popup state for the map view.

The view owns exactly one Callout and redraws whenever it changes. The
callout is shown or dismissed as a whole; callers set `title` and `detail`
while it is hidden and then call `show_at()`.
"""

from .geometry import Point


class Callout:
    def __init__(self):
        self.title = ""
        self.detail = ""
        self._location = None
        self._visible = False
        self._show_duration = 0
        self._listeners = []

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def location(self) -> Point | None:
        return self._location

    @property
    def show_duration(self) -> int:
        """Duration of the last show animation, in milliseconds."""
        return self._show_duration

    def show_at(self, location: Point, duration: int = 0):
        if duration < 0:
            raise ValueError("duration must be >= 0")
        self._location = location
        self._show_duration = int(duration)
        self._visible = True
        self._notify()

    def dismiss(self):
        if not self._visible:
            return
        self._visible = False
        self._notify()

    def add_changed_listener(self, func):
        self._listeners.append(func)

    def _notify(self):
        for func in list(self._listeners):
            func(self)
