"""
Qt plumbing for running a compare off the UI thread.

A worker runs once. Cancelling never interrupts the work in progress:
the outcome is dropped when it arrives and ``cancelled`` is emitted
in place of ``finished``.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Optional

from PyQt6.QtCore import Qt, QObject, QThread, pyqtSignal, pyqtSlot, QMutex, QMutexLocker


class WorkerState(Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class WorkerSignals(QObject):
    """Outcome signals; exactly one of finished/error/cancelled fires per run."""
    status = pyqtSignal(str)
    finished = pyqtSignal(object)
    error = pyqtSignal(str, str)  # (exception type, message)
    cancelled = pyqtSignal()


class BaseWorker(QObject):
    """
    Runs ``do_work`` once and reports its outcome through ``signals``.

    Subclasses implement ``do_work`` and may call ``report_status``.
    """

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.signals = WorkerSignals()
        self._mutex = QMutex()
        self._state = WorkerState.PENDING
        self._cancel_requested = False
        self.result: Any = None
        self.error: Optional[tuple[str, str]] = None

    @property
    def state(self) -> WorkerState:
        with QMutexLocker(self._mutex):
            return self._state

    @property
    def is_cancelled(self) -> bool:
        with QMutexLocker(self._mutex):
            return self._cancel_requested

    def cancel(self) -> None:
        """Ask for the outcome to be dropped. The state changes when run() ends."""
        with QMutexLocker(self._mutex):
            self._cancel_requested = True

    def _finish(self, state: WorkerState) -> None:
        with QMutexLocker(self._mutex):
            self._state = state

    @pyqtSlot()
    def run(self) -> None:
        if self.is_cancelled:
            self._finish(WorkerState.CANCELLED)
            self.signals.cancelled.emit()
            return

        with QMutexLocker(self._mutex):
            self._state = WorkerState.RUNNING

        try:
            outcome = self.do_work()
        except Exception as e:
            logging.exception(f"{type(self).__name__} - Worker failed")
            self.error = (type(e).__name__, str(e))
            self._finish(WorkerState.FAILED)
            self.signals.error.emit(*self.error)
            return

        # A cancel that arrived while working drops the outcome
        if self.is_cancelled:
            self._finish(WorkerState.CANCELLED)
            self.signals.cancelled.emit()
            return

        self.result = outcome
        self._finish(WorkerState.COMPLETED)
        self.signals.finished.emit(outcome)

    def do_work(self) -> Any:
        raise NotImplementedError

    def report_status(self, message: str) -> None:
        self.signals.status.emit(message)


class WorkerThread(QThread):
    """Owns a worker, starts it on ``start()`` and quits when it reports."""

    def __init__(self, worker: BaseWorker, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.worker = worker
        worker.moveToThread(self)
        self.started.connect(worker.run)

        # quit() is thread-safe, call it from the worker thread directly
        direct = Qt.ConnectionType.DirectConnection
        worker.signals.finished.connect(self.quit, direct)
        worker.signals.error.connect(self.quit, direct)
        worker.signals.cancelled.connect(self.quit, direct)

    def cancel(self) -> None:
        self.worker.cancel()
