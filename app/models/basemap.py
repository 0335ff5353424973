"""
Raster basemap drawn from an XYZ tile service in Web Mercator.

Only the tile maths lives here: which tiles cover an extent at a given
screen width, where each tile sits on the map, and how to decode one.
Fetching is left to the caller so it can happen off the UI thread.
"""

from dataclasses import dataclass
from io import BytesIO
import math

import numpy as np
from PIL import Image

from ..config import con_dict
from .geometry import WEB_MERCATOR, Envelope

ORIGIN_SHIFT = 20037508.342789244
TILE_SIZE = 256
MAX_TILES = 64


@dataclass(frozen=True)
class Tile:
    z: int
    x: int
    y: int
    extent: Envelope


class Basemap:
    """A named tile style; see `create_light_gray_canvas()`."""
    def __init__(self, name: str, tile_url: str, max_zoom: int = 16):
        self.name = name
        self.tile_url = tile_url
        self.max_zoom = max_zoom

    def __repr__(self):
        return f"Basemap({self.name!r})"

    @classmethod
    def create_light_gray_canvas(cls):
        return cls("Light Gray Canvas", con_dict["light_gray_tile_url"], con_dict["max_tile_zoom"])

    def zoom_for(self, extent: Envelope, width_px: int) -> int:
        """Smallest zoom whose resolution is at least as fine as the view's."""
        if width_px <= 0 or extent.width <= 0:
            return 0
        resolution = extent.width / width_px
        z = math.ceil(math.log2((2 * ORIGIN_SHIFT) / (TILE_SIZE * resolution)))
        return int(min(max(z, 0), self.max_zoom))

    def tiles_for_extent(self, extent: Envelope, width_px: int) -> list[Tile]:
        z = self.zoom_for(extent, width_px)
        # back off until the tile count is reasonable
        while True:
            tiles = self._tiles_at(extent, z)
            if len(tiles) <= MAX_TILES or z == 0:
                return tiles
            z -= 1

    def _tiles_at(self, extent: Envelope, z: int) -> list[Tile]:
        n = 2 ** z
        size = 2 * ORIGIN_SHIFT / n

        def _clamp(i):
            return min(max(i, 0), n - 1)

        x0 = _clamp(math.floor((extent.xmin + ORIGIN_SHIFT) / size))
        x1 = _clamp(math.floor((extent.xmax + ORIGIN_SHIFT) / size))
        y0 = _clamp(math.floor((ORIGIN_SHIFT - extent.ymax) / size))
        y1 = _clamp(math.floor((ORIGIN_SHIFT - extent.ymin) / size))

        tiles = []
        for y in range(y0, y1 + 1):
            for x in range(x0, x1 + 1):
                xmin = -ORIGIN_SHIFT + x * size
                ymax = ORIGIN_SHIFT - y * size
                tiles.append(Tile(z, x, y, Envelope(xmin, ymax - size, xmin + size, ymax, WEB_MERCATOR)))
        return tiles

    def url_for(self, tile: Tile) -> str:
        return self.tile_url.format(z=tile.z, x=tile.x, y=tile.y)

    @staticmethod
    def decode(data: bytes) -> np.ndarray:
        with Image.open(BytesIO(data)) as im:
            return np.asarray(im.convert("RGB"))
