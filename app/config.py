"""
Global configuration dictionary and default parameters used across the viewer.

Stores the hosted-content reference, identify and callout settings, HTTP
behaviour and window/drawing constants shared by the model, interface and
ui modules.
"""

con_dict = {
    # hosted content (ArcGIS Online)
    "portal_url": "https://www.arcgis.com",
    "portal_item_id": "317b5f03d5de4f368fb802fe32d15dfa",
    "layer_id": 0,
    "http_timeout": 30,

    # basemap
    "light_gray_tile_url": (
        "https://services.arcgisonline.com/ArcGIS/rest/services/"
        "Canvas/World_Light_Gray_Base/MapServer/tile/{z}/{y}/{x}"
    ),
    "max_tile_zoom": 16,

    # identify / hit-test
    "identify_tolerance": 10,
    "identify_max_results": 10,

    # callout
    "callout_title": "Location",

    # window
    "window_title": "East Van Breweries",
    "window_width": 800,
    "window_height": 700,

    # drawing
    "feature_colour": "#e0651b",
    "selection_colour": "#00ffff",
    "feature_size": 40,
}


def set_value(key, value):
    if key not in con_dict:
        raise KeyError(key)
    # naive cast
    ty = type(con_dict[key])
    con_dict[key] = ty(value)


def get_all():
    return con_dict
