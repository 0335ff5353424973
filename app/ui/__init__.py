"""
UI module for East Van Breweries.

This package contains the Qt-based user-interface components:

- MapView:
    The map canvas. Draws the basemap, the breweries layer with its
    selection highlight and the coordinate callout; reports clicks; converts
    screen points to map coordinates; runs identify hit-tests.

- display_text:
    Formatting of the strings shown to the user (callout detail, selection
    status).

The top-level window lives in `app.main`.
"""

from .display_text import gen_callout_detail, gen_selection_text
from .map_view import MapView

__all__ = [
    "MapView",
    "gen_callout_detail",
    "gen_selection_text",
]
