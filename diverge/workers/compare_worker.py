"""
Worker for folder comparison.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

from PyQt6.QtCore import QObject

from diverge.workers.base_worker import BaseWorker
from diverge.core.folder.comparer import FolderComparer, CompareOptions
from diverge.core.models import CompareResult


class FolderCompareWorker(BaseWorker):
    """
    Worker for comparing folders.

    Handles large directory trees without blocking the UI.

    The ignore list is copied when the worker is created, so the
    caller may keep editing its settings while the compare runs.
    Cancelling does not interrupt the walk; the result is discarded
    and `cancelled` is emitted instead of `finished`.
    """

    def __init__(
        self,
        left_path: str | Path,
        right_path: str | Path,
        ignore_dirs: Iterable[str] = (),
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        # Kept as given; Path("") would silently become "."
        self.left_path = left_path
        self.right_path = right_path
        self.ignore_dirs: tuple[str, ...] = tuple(ignore_dirs)

    def do_work(self) -> CompareResult:
        self.report_status(f"Comparing {self.left_path} with {self.right_path}...")

        comparer = FolderComparer(CompareOptions(ignore_dirs=list(self.ignore_dirs)))
        result = comparer.compare(self.left_path, self.right_path)

        self.report_status(result.summary)
        return result
