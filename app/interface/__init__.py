"""
East Van Breweries Interface Package
====================================

The lightweight interface layer between the map view's gestures and the
hosted-content models.

It provides:

- ``PortalLoader``
  Starts the one portal-item load of the session and reports failure.

- ``MapInteractionController``
  Builds the breweries layer from the loaded item, puts the map on the
  view once the layer has loaded, and handles clicks (feature selection
  and the coordinate callout).

- ``ToolDispatcher``
  Routes click events from the view to the active handler.

- ``tools``
  Stateless helpers, notably the identify hit-test.

Design Notes
------------
Nothing here blocks. Loads and identify calls return immediately; their
outcome arrives later on the UI thread through done listeners. Errors from
loads go to the window's error reporter; errors from identify are logged and
dropped.

Typical Usage
-------------
::

    controller = MapInteractionController(view, error_reporter=show_error)
    loader = PortalLoader(controller.add_breweries_layer, error_reporter=show_error)
    loader.load()
"""

from .map_controller import MapInteractionController
from .portal_loader import PortalLoader
from .tool_dispatcher import ToolDispatcher

__all__ = [
    "MapInteractionController",
    "PortalLoader",
    "ToolDispatcher",
]
