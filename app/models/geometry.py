"""
Point and envelope geometry in a single projected coordinate system.

Features are requested from the service already projected to Web Mercator,
so the only client-side projection is WGS84 to Web Mercator for a layer's
declared extent. ESRI's legacy id 102100 is folded into 3857 on read.
"""

from dataclasses import dataclass
import math

WEB_MERCATOR = 3857
WGS84 = 4326
EARTH_RADIUS = 6378137.0
MAX_LATITUDE = 85.0511287798
_WKID_ALIASES = {102100: WEB_MERCATOR, 102113: WEB_MERCATOR, 900913: WEB_MERCATOR}


def wkid_from_json(sr: dict | None, default=None):
    """Return the well-known id of an ArcGIS ``spatialReference`` object."""
    if not sr:
        return default
    wkid = sr.get("latestWkid") or sr.get("wkid")
    if wkid is None:
        return default
    return _WKID_ALIASES.get(int(wkid), int(wkid))


@dataclass(frozen=True)
class Point:
    x: float
    y: float
    wkid: int | None = WEB_MERCATOR

    @classmethod
    def from_json(cls, d: dict, wkid=WEB_MERCATOR):
        """Build from ``{"x": .., "y": ..}``; returns None for non-point geometry."""
        if not d or d.get("x") is None or d.get("y") is None:
            return None
        return cls(float(d["x"]), float(d["y"]), wkid_from_json(d.get("spatialReference"), wkid))


@dataclass(frozen=True)
class Envelope:
    xmin: float
    ymin: float
    xmax: float
    ymax: float
    wkid: int | None = WEB_MERCATOR

    def __post_init__(self):
        if self.xmin > self.xmax or self.ymin > self.ymax:
            raise ValueError(f"Envelope min exceeds max: {self}")

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    @property
    def center(self) -> Point:
        return Point((self.xmin + self.xmax) / 2.0, (self.ymin + self.ymax) / 2.0, self.wkid)

    def contains(self, point: Point) -> bool:
        return self.xmin <= point.x <= self.xmax and self.ymin <= point.y <= self.ymax

    def to_web_mercator(self) -> "Envelope":
        """
        Project a WGS84 envelope to Web Mercator. Already-projected envelopes
        (or ones with no spatial reference) come back unchanged.
        """
        if self.wkid in (WEB_MERCATOR, None):
            return self
        if self.wkid != WGS84:
            raise ValueError(f"Cannot project extent from wkid {self.wkid}")

        def x(lon):
            return EARTH_RADIUS * math.radians(lon)

        def y(lat):
            lat = max(-MAX_LATITUDE, min(MAX_LATITUDE, lat))
            return EARTH_RADIUS * math.log(math.tan(math.pi / 4 + math.radians(lat) / 2))

        return Envelope(x(self.xmin), y(self.ymin), x(self.xmax), y(self.ymax), WEB_MERCATOR)

    def expanded(self, factor: float, min_size: float = 0.0) -> "Envelope":
        """
        Scale about the centre. Zero-size sides grow to `min_size` first so a
        single-feature extent still gives a usable viewport.
        """
        half_w = max(self.width, min_size) * factor / 2.0
        half_h = max(self.height, min_size) * factor / 2.0
        c = self.center
        return Envelope(c.x - half_w, c.y - half_h, c.x + half_w, c.y + half_h, self.wkid)

    @classmethod
    def from_points(cls, points):
        points = [p for p in points if p is not None]
        if not points:
            raise ValueError("Cannot build an envelope from no points")
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return cls(min(xs), min(ys), max(xs), max(ys), points[0].wkid)

    @classmethod
    def from_json(cls, d: dict):
        return cls(
            float(d["xmin"]), float(d["ymin"]), float(d["xmax"]), float(d["ymax"]),
            wkid_from_json(d.get("spatialReference")),
        )
