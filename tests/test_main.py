"""
End-to-end window tests: BreweriesWindow wired to a fake portal.

Run with:
    pytest tests/test_main.py -v
"""

import requests

from app.main import BreweriesWindow
from app.models import LoadStatus

from conftest import ITEM_URL, LAYER_URL, make_response


def make_window(portal, runner, tile_session, monkeypatch):
    dialogs = []
    monkeypatch.setattr(
        "app.main.QMessageBox.critical",
        lambda parent, title, text: dialogs.append((title, text)),
    )
    win = BreweriesWindow(portal=portal, runner=runner, tile_session=tile_session)
    return win, dialogs


def test_window_shell(qapp, portal, sync_runner, tile_session, monkeypatch):
    win, _ = make_window(portal, sync_runner, tile_session, monkeypatch)
    assert win.windowTitle() == "East Van Breweries"
    assert (win.width(), win.height()) == (800, 700)
    assert win.centralWidget() is win.map_view
    assert win.map_view.map is None
    win.close()


def test_window_startup_shows_map(qapp, portal, sync_runner, tile_session, monkeypatch):
    win, dialogs = make_window(portal, sync_runner, tile_session, monkeypatch)
    item = win.start()

    assert item.load_status is LoadStatus.LOADED
    layer = win.controller.layer
    assert win.map_view.map.operational_layers == [layer]
    assert win.map_view.viewpoint == layer.full_extent
    assert win.controller.click_armed
    assert win.statusBar().currentMessage() == "Ready."
    assert dialogs == []
    win.close()


def test_window_portal_failure_dialog(qapp, portal, sync_runner, tile_session, monkeypatch, routes):
    routes[ITEM_URL] = requests.ConnectionError("network unreachable")
    portal.session.routes = routes
    win, dialogs = make_window(portal, sync_runner, tile_session, monkeypatch)
    win.start()

    assert dialogs == [("East Van Breweries", "Portal Item: network unreachable")]
    assert win.map_view.map is None
    win.close()


def test_window_layer_failure_dialog(qapp, portal, sync_runner, tile_session, monkeypatch, routes):
    routes[LAYER_URL] = make_response({"error": {"code": 400, "message": "invalid layer id"}})
    portal.session.routes = routes
    win, dialogs = make_window(portal, sync_runner, tile_session, monkeypatch)
    win.start()

    assert dialogs == [("East Van Breweries", "Feature Layer: invalid layer id")]
    assert win.map_view.map is None
    win.close()


def test_close_disposes_view(qapp, portal, session, sync_runner, tile_session, monkeypatch):
    win, _ = make_window(portal, sync_runner, tile_session, monkeypatch)
    view = win.map_view
    win.show()
    win.start()
    win.close()
    assert view.is_disposed
    assert win.controller.map_view is None
    assert tile_session.close_count == 1
    assert session.close_count == 1
