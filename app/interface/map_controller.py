"""
Map interaction controller.

Owns the map view for the lifetime of the window. Once the portal item has
loaded it builds the breweries layer, waits for that layer to load, and only
then puts a map on the view and arms the click tool. Each qualifying click
re-selects the features under the pointer and moves the coordinate callout.
"""

import logging

from ..config import con_dict
from ..models import (
    Basemap,
    Feature,
    FeatureLayer,
    LoadStatus,
    Map,
    MapClickEvent,
    MouseButton,
    PortalItem,
)
from ..ui.display_text import gen_callout_detail, gen_selection_text
from .tool_dispatcher import ToolDispatcher

logger = logging.getLogger(__name__)

# callout show animation, milliseconds
CALLOUT_DURATION = 0


class MapInteractionController:
    """
    Binds the breweries layer to a map view and handles clicks on it.

    Args:
        map_view: A MapView (or anything with its API).
        error_reporter: Called with the dialog text when a load fails.
        status_reporter: Optional, called with short progress messages.
        runner: TaskRunner used for the layer load.
    """
    def __init__(self, map_view, error_reporter, status_reporter=None, runner=None):
        self.map_view = map_view
        self._report_error = error_reporter
        self._report_status = status_reporter or (lambda msg: None)
        self._runner = runner
        self.layer = None
        self.map = None
        self.dispatcher = ToolDispatcher(map_view) if map_view is not None else None

    @property
    def click_armed(self) -> bool:
        return self.dispatcher is not None and self.dispatcher.has_click

    # --- layer attach --------------------------------------------------------
    def add_breweries_layer(self, portal_item: PortalItem) -> FeatureLayer:
        if self.layer is not None:
            logger.warning("Breweries layer already created; ignoring second request")
            return self.layer
        self.layer = FeatureLayer(portal_item, con_dict["layer_id"], runner=self._runner)
        self.layer.add_done_loading_listener(self._on_layer_loaded)
        self._report_status("Loading feature layer...")
        self.layer.load_async()
        return self.layer

    def _on_layer_loaded(self):
        layer = self.layer
        if layer.load_status is not LoadStatus.LOADED:
            message = f"Feature Layer: {layer.load_error}"
            logger.error(message)
            self._report_status("Failed to load.")
            self._report_error(message)
            return
        if self.map_view is None:
            logger.info("Layer loaded after the view was disposed; not binding")
            return

        self.map = Map(Basemap.create_light_gray_canvas())
        self.map.add_operational_layer(layer)
        self.map_view.set_map(self.map)
        self.map_view.set_viewpoint(layer.full_extent)
        self.dispatcher.set_single_click(self.handle_click, temporary=False)
        logger.info(f"Map ready with {len(layer.features)} features")
        self._report_status("Ready.")

    # --- clicks --------------------------------------------------------------
    @staticmethod
    def is_qualifying(event: MapClickEvent) -> bool:
        """Primary button, and no drag or pan between press and release."""
        return event.still_since_press and event.button is MouseButton.PRIMARY

    def handle_click(self, event: MapClickEvent):
        logger.debug(f"Map clicked: {event}")
        self.select_feature(event)
        self.create_geo_callout(event)

    def select_feature(self, event: MapClickEvent):
        """
        Replace the layer selection with the features under the click.

        Returns the identify future, or None if the click was ignored.
        """
        if not self.is_qualifying(event) or self.layer is None:
            return None
        self.layer.clear_selection()
        future = self.map_view.identify_layer_async(
            self.layer,
            event.screen_point,
            con_dict["identify_tolerance"],
            False,
            con_dict["identify_max_results"],
        )
        future.add_done_listener(lambda: self._on_identified(future))
        return future

    def _on_identified(self, future):
        try:
            result = future.get()
        except Exception:
            # a missed identify never interrupts the user
            logger.error("Identify failed; selection unchanged", exc_info=True)
            return
        features = [e for e in result.elements if isinstance(e, Feature)]
        self.layer.select_features(features)
        self._report_status(gen_selection_text(len(features)))

    def create_geo_callout(self, event: MapClickEvent):
        if not self.is_qualifying(event):
            return
        callout = self.map_view.callout
        if callout.visible:
            callout.dismiss()

        map_point = self.map_view.screen_to_location(event.x, event.y)
        if map_point is None:
            return

        if not callout.visible:
            callout.title = con_dict["callout_title"]
            callout.detail = gen_callout_detail(map_point)
            callout.show_at(map_point, CALLOUT_DURATION)

    # --- lifecycle -----------------------------------------------------------
    def dispose(self):
        """Release the view. Safe to call more than once, or with no view."""
        if self.map_view is None:
            return
        self.dispatcher.clear()
        self.map_view.dispose()
        self.map_view = None
