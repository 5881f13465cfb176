"""Cancellable deferred-step scheduling on the Qt event loop."""

from typing import Callable, Optional, Protocol

import shiboken6
from PySide6.QtCore import QObject, QTimer


class StepHandle(Protocol):
    """Handle to one pending deferred call."""

    @property
    def active(self) -> bool:
        ...

    def cancel(self) -> None:
        ...


class StepScheduler(Protocol):
    """Runs a callback once after a delay in milliseconds."""

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> StepHandle:
        ...


class QtStepHandle:
    """Pending single-shot ``QTimer``; the timer is released once it fires or is cancelled."""

    def __init__(self, timer: QTimer):
        self._timer: Optional[QTimer] = timer

    @property
    def active(self) -> bool:
        timer = self._timer
        return timer is not None and shiboken6.isValid(timer) and timer.isActive()

    def cancel(self) -> None:
        self._release(stop=True)

    def _release(self, stop: bool = False) -> None:
        timer, self._timer = self._timer, None
        if timer is None or not shiboken6.isValid(timer):
            return
        if stop:
            timer.stop()
        timer.timeout.disconnect()
        timer.deleteLater()


class QtStepScheduler(QObject):
    """Step scheduler backed by single-shot timers on the current thread's event loop.

    Timers are parented to the scheduler so Qt owns them and frees them
    with ``deleteLater`` after they fire or are cancelled.
    """

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> QtStepHandle:
        timer = QTimer(self)
        timer.setSingleShot(True)
        handle = QtStepHandle(timer)

        def fire():
            if handle._timer is None:
                return  # Cancelled
            handle._release()
            callback()

        timer.timeout.connect(fire)
        timer.start(max(0, int(delay_ms)))
        return handle
