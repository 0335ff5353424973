

class ToolDispatcher:
    """
    Lightweight router for map click events.

    Accepts any view object that exposes ``set_on_mouse_clicked(handler)``.
    A temporary handler (a one-off tool) takes precedence over the permanent
    one; with neither set, clicks are dropped.
    """
    def __init__(self, view):
        self.view = view
        self._perm_click = None
        self._tmp_click = None
        # bind shim
        self.view.set_on_mouse_clicked(self._shim_click)

    def set_single_click(self, func, *, temporary=True):
        if temporary:
            self._tmp_click = func
        else:
            self._perm_click = func

    @property
    def has_click(self) -> bool:
        return callable(self._tmp_click) or callable(self._perm_click)

    def clear_temp_click(self): self._tmp_click = None

    # clear all for teardown
    def clear(self):
        self._perm_click = None
        self.clear_temp_click()

    def _shim_click(self, event):
        f = self._tmp_click or self._perm_click
        if callable(f): f(event)
