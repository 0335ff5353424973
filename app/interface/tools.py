"""
Stateless helpers behind the map tools.

`identify_features` is the hit-test run by `MapView.identify_layer_async`:
given where each feature currently sits on screen, it returns the features
within a pixel tolerance of a screen point, nearest first.
"""

from dataclasses import dataclass, field
import logging

import numpy as np

from ..models import Feature, FeatureLayer, LoadStatus

logger = logging.getLogger(__name__)


@dataclass
class IdentifyLayerResult:
    """
    Result of one identify call.

    Attributes
    ----------
    layer : FeatureLayer
        The layer that was queried.
    elements : list
        Hit elements, nearest first. Only `Feature` objects are produced
        today; callers still filter by type.
    """
    layer: FeatureLayer
    elements: list = field(default_factory=list)


def identify_features(
    layer: FeatureLayer,
    features: list[Feature],
    screen_xy: np.ndarray,
    screen_point: tuple[float, float],
    tolerance: float,
    popups_only: bool,
    max_results: int,
) -> IdentifyLayerResult:
    """
    Hit-test `features` at `screen_point`.

    Parameters
    ----------
    features : list of Feature
        Features with geometry, in the same order as `screen_xy`.
    screen_xy : (N, 2) array
        Display-space pixel position of each feature.
    tolerance : float
        Search radius in pixels.
    popups_only : bool
        If True, only layers with popups enabled return anything.
    max_results : int
        Maximum number of elements to return (>= 1).
    """
    if tolerance < 0:
        raise ValueError(f"tolerance must be >= 0, got {tolerance}")
    if max_results < 1:
        raise ValueError(f"max_results must be >= 1, got {max_results}")
    if layer.load_status is not LoadStatus.LOADED:
        raise RuntimeError(f"{layer!r} is not loaded")

    result = IdentifyLayerResult(layer)
    if popups_only and not layer.popup_enabled:
        return result
    if not features:
        return result

    xy = np.asarray(screen_xy, dtype=float).reshape(-1, 2)
    if xy.shape[0] != len(features):
        raise ValueError("screen_xy and features differ in length")

    d = np.hypot(xy[:, 0] - screen_point[0], xy[:, 1] - screen_point[1])
    hits = np.nonzero(d <= tolerance)[0]
    order = hits[np.argsort(d[hits], kind="stable")][:max_results]
    result.elements = [features[i] for i in order]
    logger.debug(f"identify at {screen_point}: {len(hits)} hits, returning {len(result.elements)}")
    return result
