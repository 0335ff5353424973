"""
Map view widget.

A matplotlib canvas embedded in Qt that draws a Map: basemap tiles at the
bottom, each operational layer as a scatter with a highlighted selection
overlay above it, and the view's single callout on top. The navigation
toolbar gives pan and zoom.

Screen points used by `screen_to_location`, `identify_layer_async` and
`MapClickEvent` are canvas pixels in matplotlib display space (origin at the
bottom-left).
"""

import logging

from matplotlib.backends.backend_qt5agg import FigureCanvasQTAgg as FigureCanvas, NavigationToolbar2QT as NavigationTool
from matplotlib.figure import Figure

import numpy as np
import requests

from PyQt5.QtCore import QTimer
from PyQt5.QtWidgets import QVBoxLayout, QWidget

from ..config import con_dict
from ..interface.tools import identify_features
from ..models import WEB_MERCATOR, Callout, Envelope, MapClickEvent, MouseButton, Point
from ..tasks import TaskFuture, get_default_runner

logger = logging.getLogger(__name__)

# max pointer travel (px) between press and release that still counts as a click
CLICK_SLOP = 3
# margin around an extent passed to set_viewpoint
VIEWPOINT_PADDING = 1.1
# smallest viewport side (m), so a one-feature extent is not a zero-size view
MIN_VIEWPOINT_SIZE = 500.0
# debounce for refetching tiles after pan/zoom (ms)
TILE_REFRESH_DELAY = 250

_MPL_BUTTONS = {1: MouseButton.PRIMARY, 2: MouseButton.MIDDLE, 3: MouseButton.SECONDARY}


class MapView(QWidget):
    """
    Displays one Map and reports clicks on it.

    Parameters
    ----------
    parent : QWidget, optional
    runner : TaskRunner, optional
        Runs tile fetches and identify calls. Defaults to the shared runner.
    session : requests.Session, optional
        HTTP session for basemap tiles. Closed by `dispose()`.
    """
    def __init__(self, parent=None, runner=None, session=None):
        super().__init__(parent)
        self._runner = runner
        self._session = session or requests.Session()
        self._map = None
        self._viewpoint = None
        self._on_mouse_clicked = None
        self._press = None
        self._disposed = False

        self._layer_artists = {}   # layer -> (features, selection) collections
        self._tiles = {}           # (z, x, y) -> AxesImage, None while fetching
        self._tile_zoom = None
        self._callout_artist = None

        self._callout = Callout()
        self._callout.add_changed_listener(self._draw_callout)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self.fig = Figure(figsize=(8, 7))
        self.ax = self.fig.add_axes([0, 0, 1, 1])
        self.ax.set_axis_off()
        self.ax.set_aspect("equal", adjustable="datalim")
        self.canvas = FigureCanvas(self.fig)
        layout.addWidget(self.canvas)

        self.toolbar = NavigationTool(self.canvas, self)
        layout.addWidget(self.toolbar)

        self._cids = [
            self.canvas.mpl_connect("button_press_event", self._on_press),
            self.canvas.mpl_connect("button_release_event", self._on_release),
        ]
        self._tile_timer = QTimer(self)
        self._tile_timer.setSingleShot(True)
        self._tile_timer.setInterval(TILE_REFRESH_DELAY)
        self._tile_timer.timeout.connect(self.refresh_basemap)
        self.ax.callbacks.connect("xlim_changed", self._on_limits_changed)
        self.ax.callbacks.connect("ylim_changed", self._on_limits_changed)

    # --- properties ----------------------------------------------------------
    @property
    def runner(self):
        return self._runner or get_default_runner()

    @property
    def map(self):
        return self._map

    @property
    def callout(self) -> Callout:
        return self._callout

    @property
    def viewpoint(self) -> Envelope | None:
        """The extent last passed to `set_viewpoint`."""
        return self._viewpoint

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    # --- map and viewpoint ---------------------------------------------------
    def set_map(self, map_):
        if self._disposed:
            raise RuntimeError("MapView has been disposed")
        self._detach_map()
        self._map = map_
        if map_ is not None:
            map_.add_changed_listener(self._on_map_changed)
            self._on_map_changed(map_)
        self.canvas.draw_idle()

    def set_viewpoint(self, extent: Envelope):
        if extent is None:
            raise ValueError("extent is required")
        self._viewpoint = extent
        target = extent.expanded(VIEWPOINT_PADDING, MIN_VIEWPOINT_SIZE)
        self.ax.set_xlim(target.xmin, target.xmax)
        self.ax.set_ylim(target.ymin, target.ymax)
        self._tile_timer.stop()
        self.refresh_basemap()
        self.canvas.draw_idle()

    def visible_extent(self) -> Envelope:
        self.ax.apply_aspect()
        x0, x1 = sorted(self.ax.get_xlim())
        y0, y1 = sorted(self.ax.get_ylim())
        return Envelope(x0, y0, x1, y1, WEB_MERCATOR)

    # --- coordinate conversion -----------------------------------------------
    def screen_to_location(self, x: float, y: float) -> Point | None:
        """Map point under display pixel (x, y); None if no map is set."""
        if self._map is None:
            return None
        self.ax.apply_aspect()
        mx, my = self.ax.transData.inverted().transform((x, y))
        return Point(float(mx), float(my), WEB_MERCATOR)

    def location_to_screen(self, point: Point) -> tuple[float, float]:
        self.ax.apply_aspect()
        sx, sy = self.ax.transData.transform((point.x, point.y))
        return float(sx), float(sy)

    # --- identify ------------------------------------------------------------
    def identify_layer_async(self, layer, screen_point, tolerance, popups_only, max_results) -> TaskFuture:
        """
        Hit-test `layer` around `screen_point` in the background.

        The future resolves to an `IdentifyLayerResult`, or fails if the layer
        is not part of the displayed map or the arguments are invalid.
        """
        try:
            features, xy = self._screen_positions(layer)
        except Exception as e:
            future = TaskFuture()
            future.set_exception(e)
            return future
        return self.runner.submit(
            identify_features, layer, features, xy,
            (float(screen_point[0]), float(screen_point[1])),
            tolerance, popups_only, max_results,
        )

    def _screen_positions(self, layer):
        if self._map is None or layer not in self._map.operational_layers:
            raise ValueError(f"{layer!r} is not in the displayed map")
        features = [f for f in layer.features if f.geometry is not None]
        data_xy = np.array([(f.geometry.x, f.geometry.y) for f in features], dtype=float).reshape(-1, 2)
        self.ax.apply_aspect()
        return features, self.ax.transData.transform(data_xy)

    # --- clicks --------------------------------------------------------------
    def set_on_mouse_clicked(self, handler):
        """`handler(MapClickEvent)` is called on every press/release pair."""
        self._on_mouse_clicked = handler

    def _limits(self):
        return tuple(self.ax.get_xlim()), tuple(self.ax.get_ylim())

    def _on_press(self, event):
        if event.inaxes is not self.ax or event.x is None:
            self._press = None
            return
        self._press = (event.x, event.y, event.button, self._limits())

    def _on_release(self, event):
        press, self._press = self._press, None
        if press is None or self._disposed or event.x is None:
            return
        x0, y0, button, limits = press
        moved = (
            event.button != button
            or abs(event.x - x0) > CLICK_SLOP
            or abs(event.y - y0) > CLICK_SLOP
        )
        click = MapClickEvent(
            float(event.x),
            float(event.y),
            _MPL_BUTTONS.get(button, MouseButton.NONE),
            not moved and self._limits() == limits,
        )
        if self._on_mouse_clicked is not None:
            self._on_mouse_clicked(click)

    # --- drawing -------------------------------------------------------------
    def _on_map_changed(self, map_):
        for layer in map_.operational_layers:
            if layer not in self._layer_artists:
                self._draw_layer(layer)
        self.canvas.draw_idle()

    def _draw_layer(self, layer):
        features = [f for f in layer.features if f.geometry is not None]
        xy = np.array([(f.geometry.x, f.geometry.y) for f in features], dtype=float).reshape(-1, 2)
        size = con_dict["feature_size"]
        base = self.ax.scatter(
            xy[:, 0], xy[:, 1], s=size, c=con_dict["feature_colour"],
            edgecolors="white", linewidths=0.8, zorder=3,
        )
        selection = self.ax.scatter(
            [], [], s=size * 2.0, facecolors="none",
            edgecolors=con_dict["selection_colour"], linewidths=2.0, zorder=4,
        )
        self._layer_artists[layer] = (base, selection)
        layer.add_selection_changed_listener(self._on_selection_changed)
        self._update_selection(layer)

    def _on_selection_changed(self, layer):
        if self._disposed or layer not in self._layer_artists:
            return
        self._update_selection(layer)
        self.canvas.draw_idle()

    def _update_selection(self, layer):
        _, selection = self._layer_artists[layer]
        pts = [(f.geometry.x, f.geometry.y) for f in layer.selected_features if f.geometry is not None]
        selection.set_offsets(np.array(pts, dtype=float).reshape(-1, 2))

    def _draw_callout(self, callout):
        if self._disposed:
            return
        if self._callout_artist is not None:
            self._callout_artist.remove()
            self._callout_artist = None
        if callout.visible and callout.location is not None:
            p = callout.location
            self._callout_artist = self.ax.annotate(
                f"{callout.title}\n{callout.detail}",
                xy=(p.x, p.y),
                xytext=(0, 14),
                textcoords="offset points",
                ha="center",
                va="bottom",
                fontsize=9,
                bbox=dict(boxstyle="round,pad=0.4", fc="white", ec="0.35", alpha=0.95),
                arrowprops=dict(arrowstyle="-", color="0.35"),
                annotation_clip=False,
                zorder=10,
            )
        self.canvas.draw_idle()

    # --- basemap -------------------------------------------------------------
    def _on_limits_changed(self, _ax):
        if self._map is not None and not self._disposed:
            self._tile_timer.start()

    def refresh_basemap(self):
        """Fetch the tiles the current extent needs; drop other zooms and off-screen tiles."""
        if self._disposed or self._map is None:
            return
        basemap = self._map.basemap
        tiles = basemap.tiles_for_extent(self.visible_extent(), max(int(self.ax.bbox.width), 1))
        zoom = tiles[0].z if tiles else None
        if zoom != self._tile_zoom:
            self._clear_tiles()
            self._tile_zoom = zoom
        else:
            needed = {(t.z, t.x, t.y) for t in tiles}
            for key in [k for k in self._tiles if k not in needed]:
                artist = self._tiles.pop(key)
                if artist is not None:
                    artist.remove()

        for tile in tiles:
            key = (tile.z, tile.x, tile.y)
            if key in self._tiles:
                continue
            self._tiles[key] = None
            future = self.runner.submit(self._fetch_tile, basemap, tile)
            future.add_done_listener(lambda f=future, t=tile: self._on_tile_fetched(f, t))

    def _fetch_tile(self, basemap, tile):
        # worker thread
        response = self._session.get(basemap.url_for(tile), timeout=con_dict["http_timeout"])
        response.raise_for_status()
        return basemap.decode(response.content)

    def _on_tile_fetched(self, future, tile):
        key = (tile.z, tile.x, tile.y)
        if self._disposed or key not in self._tiles or self._tiles[key] is not None:
            return  # stale: zoom changed or view gone
        try:
            image = future.get()
        except Exception as e:
            logger.warning(f"Basemap tile {key} unavailable: {e}")
            del self._tiles[key]
            return
        e = tile.extent
        self._tiles[key] = self.ax.imshow(
            image, extent=(e.xmin, e.xmax, e.ymin, e.ymax), origin="upper",
            interpolation="bilinear", zorder=0,
        )
        self.canvas.draw_idle()

    def _clear_tiles(self):
        for artist in self._tiles.values():
            if artist is not None:
                artist.remove()
        self._tiles.clear()

    # --- teardown ------------------------------------------------------------
    def _detach_map(self):
        if self._map is not None:
            self._map.remove_changed_listener(self._on_map_changed)
        for layer, artists in self._layer_artists.items():
            layer.remove_selection_changed_listener(self._on_selection_changed)
            for a in artists:
                a.remove()
        self._layer_artists.clear()
        self._clear_tiles()
        self._tile_zoom = None
        self._map = None

    def dispose(self):
        """Release canvas callbacks, drawn data and the tile session. Runs once."""
        if self._disposed:
            return
        self._tile_timer.stop()
        for cid in self._cids:
            self.canvas.mpl_disconnect(cid)
        self._cids = []
        self._on_mouse_clicked = None
        self._detach_map()
        self._disposed = True
        self._callout_artist = None
        self.fig.clear()
        self._session.close()
        logger.info("Map view disposed")
