"""
Folder comparison engine.

Compares two directory trees and classifies every relative path as:
- Identical (same content on both sides)
- Different (content differs)
- Only in left
- Only in right

Content comparison is exact string equality of the decoded text;
no line ending, whitespace or case normalization is applied.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from diverge.core.models import (
    CompareEntry,
    CompareResult,
    CompareStatus,
    ScanResult,
)
from diverge.core.folder.scanner import FolderScanner


@dataclass
class CompareOptions:
    """Options for folder comparison."""
    # Directory (and file) names pruned on both sides
    ignore_dirs: list[str] = field(default_factory=list)

    # Scan left and right on two threads; the result is the same either way
    parallel_scans: bool = True


class FolderComparer:
    """
    Compares two folder trees.

    Never raises for filesystem conditions: a missing side scans as
    empty and unreadable files are left out of the report.
    """

    def __init__(self, options: Optional[CompareOptions] = None):
        self.options = options or CompareOptions()

    def compare(
        self,
        left_path: Path | str,
        right_path: Path | str,
    ) -> CompareResult:
        """
        Compare two directories.

        Args:
            left_path: Left/source directory
            right_path: Right/target directory

        Returns:
            CompareResult with entries sorted by relative path
        """
        start_time = time.time()

        scanner = FolderScanner(self.options.ignore_dirs)

        if self.options.parallel_scans:
            with ThreadPoolExecutor(max_workers=2) as executor:
                left_future = executor.submit(scanner.scan, left_path)
                right_future = executor.submit(scanner.scan, right_path)
                left_scan = left_future.result()
                right_scan = right_future.result()
        else:
            left_scan = scanner.scan(left_path)
            right_scan = scanner.scan(right_path)

        result = self._compare_scans(left_scan, right_scan)
        result.left_path = str(left_path)
        result.right_path = str(right_path)
        result.compare_time = time.time() - start_time

        logging.info(f"FolderComparer - {result.summary} ({result.compare_time:.3f}s)")
        return result

    def _compare_scans(self, left_scan: ScanResult, right_scan: ScanResult) -> CompareResult:
        """Merge two scan results into a classified report."""
        ignored_dirs = sorted(set(left_scan.ignored_dirs) | set(right_scan.ignored_dirs))
        all_paths = sorted(set(left_scan.files) | set(right_scan.files))

        result = CompareResult(ignored_dirs=ignored_dirs)

        for rel_path in all_paths:
            left = left_scan.get(rel_path)
            right = right_scan.get(rel_path)

            if left is not None and right is not None:
                if left.content == right.content:
                    status = CompareStatus.IDENTICAL
                    result.identical += 1
                else:
                    status = CompareStatus.DIFFERENT
                    result.different += 1
                entry = CompareEntry(
                    rel_path=rel_path,
                    status=status,
                    left_content=left.content,
                    right_content=right.content,
                    left_path=left.absolute_path,
                    right_path=right.absolute_path,
                )
            elif left is not None:
                result.only_left += 1
                entry = CompareEntry(
                    rel_path=rel_path,
                    status=CompareStatus.ONLY_LEFT,
                    left_content=left.content,
                    left_path=left.absolute_path,
                )
            elif right is not None:
                result.only_right += 1
                entry = CompareEntry(
                    rel_path=rel_path,
                    status=CompareStatus.ONLY_RIGHT,
                    right_content=right.content,
                    right_path=right.absolute_path,
                )
            else:
                continue

            result.entries.append(entry)

        result.total = len(result.entries)
        return result


def compare(
    left_path: Path | str,
    right_path: Path | str,
    ignore_dirs: Iterable[str] = (),
) -> CompareResult:
    """Compare two directory trees, pruning ``ignore_dirs`` on both sides."""
    options = CompareOptions(ignore_dirs=list(ignore_dirs))
    return FolderComparer(options).compare(left_path, right_path)
