"""
Background workers for non-blocking operations.

All workers use Qt signals for thread-safe communication
with the UI thread.
"""

from diverge.workers.base_worker import (
    BaseWorker,
    WorkerSignals,
    WorkerState,
    WorkerThread,
)
from diverge.workers.compare_worker import (
    FolderCompareWorker,
)

__all__ = [
    # Base
    'BaseWorker',
    'WorkerSignals',
    'WorkerState',
    'WorkerThread',
    # Compare
    'FolderCompareWorker',
]
