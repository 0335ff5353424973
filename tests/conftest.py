"""
Shared fixtures: an offscreen QApplication, synchronous and manual task
runners, a routed fake HTTP session standing in for ArcGIS Online, and a
fake map view for controller tests.
"""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from io import BytesIO
from unittest.mock import NonCallableMagicMock

import pytest
import requests
from PIL import Image
from PyQt5.QtWidgets import QApplication

from app.interface.tools import IdentifyLayerResult
from app.models import Callout, Point, Portal
from app.tasks import TaskFuture, TaskRunner

ITEM_ID = "317b5f03d5de4f368fb802fe32d15dfa"
PORTAL_URL = "https://www.arcgis.com"
ITEM_URL = f"{PORTAL_URL}/sharing/rest/content/items/{ITEM_ID}"
SERVICE_URL = "https://services3.arcgis.com/example/arcgis/rest/services/East_Van_Breweries/FeatureServer"
LAYER_URL = f"{SERVICE_URL}/0"
QUERY_URL = f"{LAYER_URL}/query"
TILE_PREFIX = "https://services.arcgisonline.com/"

ITEM_JSON = {
    "id": ITEM_ID,
    "title": "East Van Breweries",
    "type": "Feature Service",
    "url": SERVICE_URL,
}
LAYER_JSON = {
    "id": 0,
    "name": "Breweries",
    "type": "Feature Layer",
    "geometryType": "esriGeometryPoint",
    "objectIdField": "FID",
    "extent": {
        "xmin": -123.1, "ymin": 49.25, "xmax": -123.05, "ymax": 49.29,
        "spatialReference": {"wkid": 4326},
    },
}
QUERY_JSON = {
    "objectIdFieldName": "FID",
    "geometryType": "esriGeometryPoint",
    "spatialReference": {"wkid": 102100, "latestWkid": 3857},
    "features": [
        {"attributes": {"FID": 1, "Name": "Strange Fellows"}, "geometry": {"x": -13700000.0, "y": 6320000.0}},
        {"attributes": {"FID": 2, "Name": "Parallel 49"}, "geometry": {"x": -13701000.0, "y": 6321000.0}},
        {"attributes": {"FID": 3, "Name": "Powell"}, "geometry": {"x": -13702000.0, "y": 6319500.0}},
    ],
}


def make_response(payload=None, status=200, content=b""):
    resp = NonCallableMagicMock(spec=requests.Response)
    resp.status_code = status
    resp.json.return_value = payload
    resp.content = content
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} Server Error")
    return resp


class FakeSession:
    """
    Routes GETs by exact URL. A route is a response, an exception to raise,
    or a callable taking the query params and returning a response.
    URLs starting with `default_prefix` get `default`.
    """
    def __init__(self, routes=None, default_prefix=None, default=None):
        self.routes = dict(routes or {})
        self.default_prefix = default_prefix
        self.default = default
        self.calls = []
        self.close_count = 0

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, dict(params or {})))
        route = self.routes.get(url)
        if route is None and self.default_prefix and url.startswith(self.default_prefix):
            route = self.default
        if route is None:
            return make_response({"error": {"code": 400, "message": f"Invalid URL {url}"}})
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(params or {})
        return route

    def close(self):
        self.close_count += 1


class ManualRunner(TaskRunner):
    """Queues submitted work until `run_next()` / `run_all()`."""
    def __init__(self):
        super().__init__(synchronous=True)
        self.pending = []

    def submit(self, func, *args, **kwargs):
        future = TaskFuture()
        self.pending.append((future, func, args, kwargs))
        return future

    def run_next(self):
        future, func, args, kwargs = self.pending.pop(0)
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            future.set_exception(e)
        else:
            future.set_result(result)

    def run_all(self):
        while self.pending:
            self.run_next()


class FakeMapView:
    """Records what the controller does to a view."""
    def __init__(self):
        self.callout = Callout()
        self.map = None
        self.viewpoint = None
        self.handler = None
        self.history = []
        self.identify_calls = []
        self.pending = []
        self.auto_complete = True
        self.identify_elements = None
        self.dispose_count = 0
        self.layer_status_at_set_map = None

    def set_on_mouse_clicked(self, handler):
        self.handler = handler

    def set_map(self, map_):
        layers = map_.operational_layers
        self.layer_status_at_set_map = [layer.load_status for layer in layers]
        self.history.append("set_map")
        self.map = map_

    def set_viewpoint(self, extent):
        self.history.append("set_viewpoint")
        self.viewpoint = extent

    def screen_to_location(self, x, y):
        return Point(x, y)

    def identify_layer_async(self, layer, screen_point, tolerance, popups_only, max_results):
        self.identify_calls.append((layer, screen_point, tolerance, popups_only, max_results))
        future = TaskFuture()
        if self.auto_complete:
            elements = self.identify_elements if self.identify_elements is not None else layer.features[:1]
            future.set_result(IdentifyLayerResult(layer, list(elements)))
        else:
            self.pending.append(future)
        return future

    def click(self, event):
        if self.handler is not None:
            self.handler(event)

    def dispose(self):
        self.dispose_count += 1


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def sync_runner():
    return TaskRunner(synchronous=True)


@pytest.fixture
def manual_runner():
    return ManualRunner()


@pytest.fixture
def routes():
    return {
        ITEM_URL: make_response(ITEM_JSON),
        LAYER_URL: make_response(LAYER_JSON),
        QUERY_URL: make_response(QUERY_JSON),
    }


@pytest.fixture
def session(routes):
    return FakeSession(routes)


@pytest.fixture
def portal(session):
    return Portal(PORTAL_URL, session=session, timeout=5)


@pytest.fixture
def tile_png():
    buf = BytesIO()
    Image.new("RGB", (256, 256), (220, 220, 220)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def tile_session(tile_png):
    return FakeSession(default_prefix=TILE_PREFIX, default=make_response(content=tile_png))


@pytest.fixture
def fake_view():
    return FakeMapView()


@pytest.fixture
def loaded_layer(portal, sync_runner):
    from app.models import FeatureLayer, PortalItem

    item = PortalItem(portal, ITEM_ID, runner=sync_runner)
    item.load_async()
    layer = FeatureLayer(item, 0, runner=sync_runner)
    layer.load_async()
    return layer
