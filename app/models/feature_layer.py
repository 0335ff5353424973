"""
Feature layer backed by a hosted feature service.

A FeatureLayer is built from a loaded PortalItem and a sub-layer index. Its
load reads the layer description and every feature (projected to Web
Mercator, paged if the service caps record counts), then computes the full
extent. After loading it carries the selection set used by the click tool.
"""

from dataclasses import dataclass, field
import logging

from .geometry import WEB_MERCATOR, Envelope, Point, wkid_from_json
from .loadable import Loadable
from .portal import PortalError, PortalItem

logger = logging.getLogger(__name__)


@dataclass
class Feature:
    """
    One row of the layer.

    Parameters
    ----------
    object_id : int
        Value of the layer's object-id field.
    attributes : dict
        All attribute values keyed by field name.
    geometry : Point | None
        Point location, or None when the row has no point geometry.
    """
    object_id: int
    attributes: dict = field(default_factory=dict)
    geometry: Point | None = None

    @classmethod
    def from_json(cls, d: dict, oid_field: str, wkid=WEB_MERCATOR):
        attributes = d.get("attributes") or {}
        oid = attributes.get(oid_field)
        return cls(
            object_id=int(oid) if oid is not None else -1,
            attributes=attributes,
            geometry=Point.from_json(d.get("geometry"), wkid),
        )


class FeatureLayer(Loadable):
    """
    Operational layer for one sub-layer of a feature service item.

    Selection
    ---------
    `clear_selection()` empties the selection; `select_features(features)`
    makes `features` the whole selection set. Both notify selection listeners
    only when the set actually changes.
    """
    def __init__(self, portal_item: PortalItem, layer_id: int = 0, runner=None):
        super().__init__(runner)
        self.portal_item = portal_item
        self.layer_id = layer_id
        self.info = {}
        self.popup_enabled = True
        self._features = []
        self._full_extent = None
        self._selected = []
        self._selection_listeners = []

    def __repr__(self):
        return f"FeatureLayer({self.portal_item.item_id!r}, {self.layer_id})"

    @property
    def name(self) -> str | None:
        return self.info.get("name")

    @property
    def features(self) -> list[Feature]:
        return list(self._features)

    @property
    def full_extent(self) -> Envelope | None:
        return self._full_extent

    @property
    def selected_features(self) -> list[Feature]:
        return list(self._selected)

    # --- loading -------------------------------------------------------------
    @property
    def layer_url(self) -> str:
        service_url = self.portal_item.url
        if not service_url:
            raise PortalError(f"Portal item {self.portal_item.item_id} does not reference a feature service")
        return f"{service_url.rstrip('/')}/{self.layer_id}"

    def _fetch(self):
        portal = self.portal_item.portal
        layer_url = self.layer_url
        info = portal.request(layer_url)
        if info.get("type") not in (None, "Feature Layer", "Table"):
            raise PortalError(f"Layer {self.layer_id} is a {info.get('type')}, not a feature layer")

        oid_field = info.get("objectIdField") or "OBJECTID"
        pageable = bool((info.get("advancedQueryCapabilities") or {}).get("supportsPagination"))
        page_size = info.get("maxRecordCount")
        rows = []
        seen = set()
        offset = 0
        while True:
            params = {
                "where": "1=1",
                "outFields": "*",
                "returnGeometry": "true",
                "outSR": WEB_MERCATOR,
            }
            if pageable:
                params["resultOffset"] = offset
                if page_size:
                    params["resultRecordCount"] = page_size
            page = portal.request(f"{layer_url}/query", params=params)
            oid_field = page.get("objectIdFieldName") or oid_field
            wkid = wkid_from_json(page.get("spatialReference"), WEB_MERCATOR)
            batch = [Feature.from_json(f, oid_field, wkid) for f in page.get("features") or []]
            fresh = [f for f in batch if f.object_id not in seen]
            seen.update(f.object_id for f in fresh)
            rows.extend(fresh)
            if not page.get("exceededTransferLimit") or not batch:
                break
            if not pageable:
                logger.warning(f"{self!r}: transfer limit hit but the service cannot page; "
                               f"keeping the first {len(rows)} features")
                break
            if not fresh:
                logger.warning(f"{self!r}: page at offset {offset} repeated known features; stopping")
                break
            offset += len(batch)
            logger.debug(f"{self!r}: transfer limit hit, fetching from offset {offset}")

        return info, rows, self._extent_for(info, rows)

    @staticmethod
    def _extent_for(info, rows) -> Envelope:
        points = [f.geometry for f in rows if f.geometry is not None]
        if points:
            return Envelope.from_points(points)
        if info.get("extent"):
            # an empty layer still needs a Web Mercator viewport
            return Envelope.from_json(info["extent"]).to_web_mercator()
        raise PortalError("Layer has no features and no extent")

    def _apply(self, payload):
        info, rows, extent = payload
        self.info = info
        self._features = rows
        self._full_extent = extent
        logger.info(f"{self!r} '{self.name}' has {len(rows)} features")

    # --- selection -----------------------------------------------------------
    def add_selection_changed_listener(self, func):
        self._selection_listeners.append(func)

    def remove_selection_changed_listener(self, func):
        if func in self._selection_listeners:
            self._selection_listeners.remove(func)

    def clear_selection(self):
        if not self._selected:
            return
        self._selected = []
        self._notify_selection()

    def select_features(self, features):
        new = list(features)
        if new == self._selected:
            return
        self._selected = new
        self._notify_selection()

    def is_selected(self, feature: Feature) -> bool:
        return any(f.object_id == feature.object_id for f in self._selected)

    def _notify_selection(self):
        for func in list(self._selection_listeners):
            func(self)
