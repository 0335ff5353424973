"""
Load lifecycle shared by every remotely-resolved resource.

A Loadable starts NOT_LOADED, moves to LOADING when `load_async()` is first
called and ends in exactly one terminal state, LOADED or FAILED_TO_LOAD.
There is no retry: once terminal, further `load_async()` calls do nothing.
"""

from enum import Enum
import logging

from ..tasks import get_default_runner

logger = logging.getLogger(__name__)


class LoadStatus(Enum):
    NOT_LOADED = "not_loaded"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED_TO_LOAD = "failed_to_load"


class Loadable:
    """
    Base class for resources fetched in the background.

    Subclasses implement two hooks:

    - ``_fetch()`` runs on a worker thread and returns a payload. It must not
      touch state read by the UI.
    - ``_apply(payload)`` runs on the UI thread and stores the payload.

    An exception from either hook fails the load; the exception is kept as
    `load_error` and its text is what callers show to the user.
    """
    def __init__(self, runner=None):
        self._runner = runner
        self._load_status = LoadStatus.NOT_LOADED
        self._load_error = None
        self._done_listeners = []

    @property
    def load_status(self) -> LoadStatus:
        return self._load_status

    @property
    def load_error(self) -> BaseException | None:
        return self._load_error

    @property
    def is_terminal(self) -> bool:
        return self._load_status in (LoadStatus.LOADED, LoadStatus.FAILED_TO_LOAD)

    def add_done_loading_listener(self, func):
        """Call `func` when loading finishes, or immediately if it already has."""
        if self.is_terminal:
            func()
            return
        self._done_listeners.append(func)

    def load_async(self):
        if self._load_status is not LoadStatus.NOT_LOADED:
            return
        self._load_status = LoadStatus.LOADING
        logger.info(f"Loading {self!r}")
        runner = self._runner or get_default_runner()
        future = runner.submit(self._fetch)
        future.add_done_listener(lambda: self._on_fetched(future))

    def _on_fetched(self, future):
        try:
            self._apply(future.get())
        except Exception as e:
            logger.error(f"Failed to load {self!r}: {e}", exc_info=True)
            self._load_error = e
            self._load_status = LoadStatus.FAILED_TO_LOAD
        else:
            logger.info(f"Loaded {self!r}")
            self._load_status = LoadStatus.LOADED

        listeners, self._done_listeners = self._done_listeners, []
        for func in listeners:
            func()

    def _fetch(self):
        raise NotImplementedError("Subclasses must implement _fetch()")

    def _apply(self, payload):
        raise NotImplementedError("Subclasses must implement _apply()")
