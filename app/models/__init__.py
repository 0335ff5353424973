"""
East Van Breweries app.models package.

Data structures for the hosted content shown on the map.

Classes
-------
Loadable, LoadStatus
    One-shot asynchronous load lifecycle shared by remote resources.
Portal, PortalItem, PortalError
    ArcGIS REST access and a content item resolved by id.
FeatureLayer, Feature
    The operational point layer, its features and its selection set.
Basemap, Map
    Background tile style and the map document combining it with the layer.
Callout
    The single anchored popup shown by the map view.
MapClickEvent, MouseButton
    Pointer clicks reported by the map view.
Point, Envelope
    Web Mercator geometry.

Notes
-----
Everything remote is fetched through a `Loadable`, whose work runs on the
task runner's worker threads and whose listeners fire on the UI thread.
"""

from .basemap import Basemap, Tile
from .callout import Callout
from .events import MapClickEvent, MouseButton
from .feature_layer import Feature, FeatureLayer
from .geometry import WEB_MERCATOR, Envelope, Point
from .loadable import Loadable, LoadStatus
from .map import Map
from .portal import Portal, PortalError, PortalItem

__all__ = [
    "Basemap",
    "Tile",
    "Callout",
    "MapClickEvent",
    "MouseButton",
    "Feature",
    "FeatureLayer",
    "WEB_MERCATOR",
    "Envelope",
    "Point",
    "Loadable",
    "LoadStatus",
    "Map",
    "Portal",
    "PortalError",
    "PortalItem",
]
