"""
Background execution for network loads and hit-tests.

Work is submitted to a `TaskRunner`, which runs it on Qt's global thread pool
and hands back a `TaskFuture`. Completion is relayed to the thread that owns
the runner (the UI thread) through a queued Qt signal, so every listener
registered with `TaskFuture.add_done_listener` may mutate widgets directly.

A runner built with ``synchronous=True`` runs work inline on the caller's
thread. The test-suite uses it so that loads complete before the call returns.
"""

import logging

from PyQt5.QtCore import QObject, QRunnable, QThreadPool, pyqtSignal, pyqtSlot

logger = logging.getLogger(__name__)


class TaskFuture:
    """
    Result holder for one piece of background work.

    Listeners take no arguments; they call `get()` to read the outcome, which
    re-raises the error if the work failed.
    """
    def __init__(self):
        self._done = False
        self._result = None
        self._error = None
        self._listeners = []

    def done(self) -> bool:
        return self._done

    def get(self):
        if not self._done:
            raise RuntimeError("Task has not completed")
        if self._error is not None:
            raise self._error
        return self._result

    def add_done_listener(self, func):
        """Call `func` once the task completes (immediately if it already has)."""
        if self._done:
            self._call(func)
            return
        self._listeners.append(func)

    def set_result(self, result):
        self._complete(result, None)

    def set_exception(self, error: BaseException):
        self._complete(None, error)

    def _complete(self, result, error):
        if self._done:
            raise RuntimeError("Task already completed")
        self._result = result
        self._error = error
        self._done = True
        listeners, self._listeners = self._listeners, []
        for func in listeners:
            self._call(func)

    @staticmethod
    def _call(func):
        try:
            func()
        except Exception:
            logger.error(f"Done listener {func!r} raised", exc_info=True)


class _Relay(QObject):
    """Lives on the UI thread; receives worker results through a queued signal."""
    finished = pyqtSignal(object, object, object)

    def __init__(self):
        super().__init__()
        self.finished.connect(self._deliver)

    @pyqtSlot(object, object, object)
    def _deliver(self, future, result, error):
        future._complete(result, error)


class _Job(QRunnable):
    def __init__(self, relay, future, func, args, kwargs):
        super().__init__()
        self._relay = relay
        self._future = future
        self._func = func
        self._args = args
        self._kwargs = kwargs

    def run(self):
        try:
            result = self._func(*self._args, **self._kwargs)
        except Exception as e:
            self._relay.finished.emit(self._future, None, e)
            return
        self._relay.finished.emit(self._future, result, None)


class TaskRunner:
    """
    Submits callables to a thread pool and delivers completion on the UI thread.

    Parameters
    ----------
    pool : QThreadPool, optional
        Pool to run on. Defaults to ``QThreadPool.globalInstance()``.
    synchronous : bool
        Run work inline on the calling thread instead of on the pool.
    """
    def __init__(self, pool=None, synchronous=False):
        self.synchronous = synchronous
        self._pool = None
        self._relay = None
        if not synchronous:
            self._pool = pool or QThreadPool.globalInstance()
            self._relay = _Relay()

    def submit(self, func, *args, **kwargs) -> TaskFuture:
        future = TaskFuture()
        if self.synchronous:
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                future.set_exception(e)
            else:
                future.set_result(result)
            return future
        self._pool.start(_Job(self._relay, future, func, args, kwargs))
        return future


_default_runner = None


def get_default_runner() -> TaskRunner:
    """Shared runner used by models and views that were not given one."""
    global _default_runner
    if _default_runner is None:
        _default_runner = TaskRunner()
    return _default_runner
