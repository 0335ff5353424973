"""
Access to an ArcGIS hosted-content portal over its REST API.

Classes
-------
Portal
    The portal endpoint plus the HTTP session used for every request to it.
PortalItem
    A content item resolved by id; loads its description asynchronously.
PortalError
    Error reported by the service inside a JSON body.
"""

import logging

import requests

from ..config import con_dict
from .loadable import Loadable

logger = logging.getLogger(__name__)


class PortalError(RuntimeError):
    """
    An ``{"error": {...}}`` response from an ArcGIS REST endpoint.

    ``str(error)`` is the service's own message, which is what the user sees.
    """
    def __init__(self, message, code=None, details=None):
        super().__init__(message)
        self.code = code
        self.details = details or []


class Portal:
    """
    A hosted-content service rooted at `url` (e.g. ``https://www.arcgis.com``).

    All requests go through one `requests.Session`; pass your own to control
    transport (the tests pass a mock).
    """
    def __init__(self, url: str, session: requests.Session | None = None, timeout=None):
        self.url = url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else con_dict["http_timeout"]

    def __repr__(self):
        return f"Portal({self.url!r})"

    @property
    def sharing_url(self) -> str:
        return f"{self.url}/sharing/rest"

    def item_url(self, item_id: str) -> str:
        return f"{self.sharing_url}/content/items/{item_id}"

    def request(self, url: str, params: dict | None = None) -> dict:
        """
        GET a JSON resource. HTTP failures raise `requests` exceptions; a JSON
        error body raises `PortalError`.
        """
        params = dict(params or {})
        params.setdefault("f", "json")
        logger.debug(f"GET {url} {params}")
        response = self.session.get(url, params=params, timeout=self.timeout)
        response.raise_for_status()
        payload = response.json()
        if isinstance(payload, dict) and "error" in payload:
            err = payload["error"] or {}
            raise PortalError(
                err.get("message") or "Unknown service error",
                code=err.get("code"),
                details=err.get("details"),
            )
        return payload

    def close(self):
        self.session.close()


class PortalItem(Loadable):
    """
    A portal content item identified by `item_id`.

    Once loaded, `title`, `type` and `url` (the backing service for layer
    items) are available, along with the full description in `info`.
    """
    def __init__(self, portal: Portal, item_id: str, runner=None):
        super().__init__(runner)
        self.portal = portal
        self.item_id = item_id
        self.info = {}

    def __repr__(self):
        return f"PortalItem({self.item_id!r})"

    @property
    def title(self) -> str | None:
        return self.info.get("title")

    @property
    def type(self) -> str | None:
        return self.info.get("type")

    @property
    def url(self) -> str | None:
        return self.info.get("url")

    def _fetch(self):
        return self.portal.request(self.portal.item_url(self.item_id))

    def _apply(self, payload):
        if payload.get("id") not in (None, self.item_id):
            raise PortalError(f"Portal returned item {payload.get('id')} for {self.item_id}")
        self.info = payload
