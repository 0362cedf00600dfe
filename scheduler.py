"""
Timers on top of a Tk-style event loop (anything with `after` / `after_cancel`).
"""

import logging

from constants import ITEM_HOVER_TIMEOUT

logger = logging.getLogger(__name__)


class PeriodicTask:
    """
    Runs `callback` every `interval_ms` on the event loop.

    start() while already scheduled is a no-op; stop() cancels the pending
    call so nothing fires afterwards. Exceptions raised by the callback are
    logged and the schedule continues.
    """

    def __init__(self, loop, interval_ms, callback, name=None):
        self.loop = loop
        self.interval_ms = int(interval_ms)
        self.callback = callback
        self.name = name or getattr(callback, "__name__", "task")
        self._job = None
        self._enabled = False
        self._firing = False

    @property
    def active(self):
        return self._enabled

    def start(self):
        self._enabled = True
        if self._job is None and not self._firing:
            self._job = self.loop.after(self.interval_ms, self._run)

    def stop(self):
        self._enabled = False
        if self._job is not None:
            self.loop.after_cancel(self._job)
            self._job = None

    def _run(self):
        self._job = None
        if not self._enabled:
            return
        self._firing = True
        try:
            self.callback()
        except Exception:
            logger.exception("Periodic task %s failed", self.name)
        finally:
            self._firing = False
        # The callback may have stopped us.
        if self._enabled and self._job is None:
            self._job = self.loop.after(self.interval_ms, self._run)


class HoverDebouncer:
    """
    Delays popups while the pointer moves across the indicators.

    Hovering schedules a "show" after ITEM_HOVER_TIMEOUT (immediately when a
    popup is already up). Leaving cancels any pending show, hides the item's
    popup and schedules a "reset showing" timer. Only one of the two timers
    is ever pending.
    """

    def __init__(self, loop, timeout_ms=ITEM_HOVER_TIMEOUT):
        self.loop = loop
        self.timeout_ms = timeout_ms
        self.popup_showing = False
        self._show_job = None
        self._reset_job = None

    def on_hover(self, item, hovering):
        if hovering:
            if self._show_job is None:
                timeout = 0 if self.popup_showing else self.timeout_ms
                self._cancel_reset()
                self._show_job = self.loop.after(timeout, lambda: self._show(item))
        else:
            self._cancel_show()
            item.hide_popup()
            if self.popup_showing:
                self._cancel_reset()
                self._reset_job = self.loop.after(self.timeout_ms, self._reset_showing)

    def _show(self, item):
        self._show_job = None
        self.popup_showing = True
        item.show_popup()

    def _reset_showing(self):
        self._reset_job = None
        self.popup_showing = False

    def _cancel_show(self):
        if self._show_job is not None:
            self.loop.after_cancel(self._show_job)
            self._show_job = None

    def _cancel_reset(self):
        if self._reset_job is not None:
            self.loop.after_cancel(self._reset_job)
            self._reset_job = None

    @property
    def pending(self):
        return [job for job in (self._show_job, self._reset_job) if job is not None]

    def cancel(self):
        self._cancel_show()
        self._cancel_reset()
