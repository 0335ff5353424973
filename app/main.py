"""
Entry point and main application window for East Van Breweries.

This module defines `BreweriesWindow`, the top-level Qt window. It owns the
map view, the `MapInteractionController` that binds the breweries layer to
it, and the `PortalLoader` that resolves the hosted item at startup:

    PortalLoader  -> portal item loaded
    Controller    -> feature layer loaded -> map shown, click tool armed

Load failures are shown as modal error dialogs; the window stays open
without a map. Closing the window disposes the map view and closes the
portal session.

Run this module directly via:

    python -m app.main

or call the top-level `main()` function.
"""
import logging
import sys

from PyQt5.QtWidgets import QApplication, QMainWindow, QMessageBox

from .config import con_dict
from .interface import MapInteractionController, PortalLoader
from .ui import MapView

logger = logging.getLogger(__name__)


class BreweriesWindow(QMainWindow):
    """
    Main window that:
      - Hosts the MapView as its central widget
      - Wires PortalLoader -> MapInteractionController
      - Shows load errors as dialogs and progress in the status bar
      - Disposes the map view and the portal session on close
    """
    def __init__(self, parent=None, portal=None, runner=None, tile_session=None):
        super().__init__(parent)

        self.setWindowTitle(con_dict["window_title"])
        self.resize(con_dict["window_width"], con_dict["window_height"])

        self.map_view = MapView(self, runner=runner, session=tile_session)
        self.setCentralWidget(self.map_view)

        self.controller = MapInteractionController(
            self.map_view,
            error_reporter=self.show_error,
            status_reporter=self.show_status,
            runner=runner,
        )
        self.loader = PortalLoader(
            self.controller.add_breweries_layer,
            error_reporter=self.show_error,
            status_reporter=self.show_status,
            portal=portal,
            runner=runner,
        )

    def start(self):
        """Kick off the portal item load. Returns immediately."""
        return self.loader.load()

    def show_error(self, message: str):
        QMessageBox.critical(self, con_dict["window_title"], message)

    def show_status(self, message: str):
        self.statusBar().showMessage(message)

    def closeEvent(self, event):
        self.controller.dispose()
        self.loader.dispose()
        super().closeEvent(event)


def main():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    app = QApplication(sys.argv)
    win = BreweriesWindow()
    win.show()
    win.start()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
