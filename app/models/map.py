"""
A map document: one basemap plus the operational layers drawn above it.
"""

from .basemap import Basemap


class Map:
    def __init__(self, basemap: Basemap):
        self.basemap = basemap
        self._operational_layers = []
        self._listeners = []

    def __repr__(self):
        return f"Map({self.basemap!r}, layers={len(self._operational_layers)})"

    @property
    def operational_layers(self) -> list:
        return list(self._operational_layers)

    def add_operational_layer(self, layer):
        if layer in self._operational_layers:
            return
        self._operational_layers.append(layer)
        for func in list(self._listeners):
            func(self)

    def add_changed_listener(self, func):
        self._listeners.append(func)

    def remove_changed_listener(self, func):
        if func in self._listeners:
            self._listeners.remove(func)
