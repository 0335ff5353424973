"""
East Van Breweries application package.

A small Qt desktop viewer that loads the East Vancouver breweries layer from
ArcGIS Online, draws it over a light-gray basemap, and lets the user click
breweries to select them and see the clicked map coordinates.

Subpackages
-----------
- ui
    The MapView canvas widget and user-facing text formatting.

- interface
    The thin interaction layer: PortalLoader, MapInteractionController,
    ToolDispatcher and the identify hit-test.

- models
    Portal items, the feature layer and its selection set, basemap, map,
    callout, click events and geometry, all built on the Loadable lifecycle.

Other modules
-------------
- config
    Single in-memory configuration dictionary (con_dict) with the portal
    item reference, identify settings and window constants.

- tasks
    TaskRunner / TaskFuture: background work with completion delivered on
    the UI thread.

- main
    BreweriesWindow and the `main()` function that launches the GUI.

Typical usage
-------------

    python -m app.main
"""
