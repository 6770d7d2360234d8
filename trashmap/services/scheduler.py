"""
Qt Scheduler Module.

Implements the Scheduler protocol with single-shot QTimers on the GUI event
loop.
"""

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer

logger = logging.getLogger(__name__)


class QtScheduledTask:
    """One pending callback backed by a single-shot QTimer."""

    def __init__(
        self, delay_ms: int, callback: Callable[[], None], parent: Optional[QObject]
    ) -> None:
        self._callback = callback
        self._active = True
        self._timer = QTimer(parent)
        self._timer.setSingleShot(True)
        self._timer.setInterval(delay_ms)
        self._timer.timeout.connect(self._fire)
        self._timer.start()

    @property
    def is_active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._timer.stop()
        self._timer.deleteLater()

    def _fire(self) -> None:
        if not self._active:
            return
        self._active = False
        self._timer.deleteLater()
        self._callback()


class QtScheduler(QObject):
    """
    Schedules callbacks on the Qt event loop.

    Timers are parented to the scheduler, so destroying it stops them.
    """

    def call_later(
        self, delay_ms: int, callback: Callable[[], None]
    ) -> QtScheduledTask:
        """
        Runs ``callback`` once after ``delay_ms`` milliseconds.

        Args:
            delay_ms: Delay in milliseconds.
            callback: Zero-argument callable.

        Returns:
            QtScheduledTask: Cancellable handle.
        """
        logger.debug(f"Scheduling callback in {delay_ms} ms")
        return QtScheduledTask(delay_ms, callback, self)
