"""
Resolves the configured hosted-content item and hands it on when it loads.
"""

import logging

from ..config import con_dict
from ..models import LoadStatus, Portal, PortalItem

logger = logging.getLogger(__name__)


class PortalLoader:
    """
    Starts the single portal-item load of the session.

    Args:
        on_loaded: Called with the loaded PortalItem (UI thread).
        error_reporter: Called with ``"Portal Item: <message>"`` on failure.
        status_reporter: Optional, called with short progress messages.
        portal: Portal to use; defaults to one at ``con_dict["portal_url"]``.
        item_id: Item to resolve; defaults to ``con_dict["portal_item_id"]``.
        runner: TaskRunner for the load; defaults to the shared runner.
    """
    def __init__(self, on_loaded, error_reporter, status_reporter=None,
                 portal=None, item_id=None, runner=None):
        self._on_loaded = on_loaded
        self._report_error = error_reporter
        self._report_status = status_reporter or (lambda msg: None)
        self._portal = portal
        self._item_id = item_id or con_dict["portal_item_id"]
        self._runner = runner
        self.portal_item = None
        self._disposed = False

    def load(self) -> PortalItem:
        # one item per run; a second call returns the first
        if self.portal_item is not None:
            return self.portal_item
        if self._portal is None:
            self._portal = Portal(con_dict["portal_url"])
        self.portal_item = PortalItem(self._portal, self._item_id, runner=self._runner)
        self.portal_item.add_done_loading_listener(self._on_done)
        self._report_status("Loading portal item...")
        self.portal_item.load_async()
        return self.portal_item

    def _on_done(self):
        item = self.portal_item
        if item.load_status is LoadStatus.LOADED:
            logger.info(f"Portal item '{item.title}' resolved to {item.url}")
            self._on_loaded(item)
            return
        message = f"Portal Item: {item.load_error}"
        logger.error(message)
        self._report_status("Failed to load.")
        self._report_error(message)

    def dispose(self):
        """Close the portal's HTTP session. Safe to call more than once."""
        if self._disposed:
            return
        self._disposed = True
        if self._portal is not None:
            self._portal.close()
