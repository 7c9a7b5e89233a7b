"""
Directory scanner for folder comparison.

Walks one side of a comparison and collects:
- Every readable text file, keyed by root-relative path
- The relative paths of directories pruned by an ignore rule

Error resilience: unreadable, oversized and undecodable files are
omitted from the scan instead of failing it.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Iterable, Optional

from diverge.core.models import ScanEntry, ScanResult


# Files larger than this are never read
MAX_FILE_SIZE = 10 * 1024 * 1024

TEXT_ENCODING = 'utf-8'


class FolderScanner:
    """
    Scans a directory tree into a relative-path keyed file map.

    Ignore rules are bare names compared for exact equality with the
    base name of each directory (and file) at any depth. A matching
    directory is never entered and its relative path is recorded once.
    """

    def __init__(self, ignore_names: Iterable[str] = ()):
        # Snapshot so callers can keep mutating their own list
        self.ignore_names = frozenset(ignore_names)

    def scan(self, root_path: Path | str) -> ScanResult:
        """
        Scan a directory tree.

        Args:
            root_path: Root directory to scan

        Returns:
            ScanResult with all readable files and pruned directories.
            A missing or non-directory root gives an empty result.
        """
        given = os.fspath(root_path)

        # Checked before abspath, which turns "" into the working directory
        if not given or not os.path.exists(given):
            logging.debug(f"FolderScanner - Root path not found, scanning as empty: {given!r}")
            return ScanResult(root_path=given)

        root_path = Path(os.path.abspath(given))
        result = ScanResult(root_path=str(root_path))

        if not root_path.is_dir():
            logging.debug(f"FolderScanner - Root path is not a directory, scanning as empty: {root_path}")
            return result

        def on_walk_error(error: OSError) -> None:
            logging.warning(f"FolderScanner - Walk error at {error.filename}: {error.strerror}")

        for dirpath, dirnames, filenames in os.walk(root_path, topdown=True, onerror=on_walk_error):
            current_path = Path(dirpath)

            # Prune in place so os.walk never descends into ignored dirs
            kept = []
            for dirname in dirnames:
                if dirname not in self.ignore_names:
                    kept.append(dirname)
                    continue
                dir_full_path = current_path / dirname
                if not dir_full_path.is_symlink():
                    result.ignored_dirs.append(self._relative(dir_full_path, root_path))
            dirnames[:] = kept

            for filename in filenames:
                if filename in self.ignore_names:
                    continue

                entry = self._read_entry(current_path / filename, root_path)
                if entry is not None:
                    result.files[entry.relative_path] = entry

        logging.debug(
            f"FolderScanner - Scanned {root_path}: {result.file_count} files, "
            f"{len(result.ignored_dirs)} ignored dirs"
        )
        return result

    def _read_entry(self, file_path: Path, root_path: Path) -> Optional[ScanEntry]:
        """Read a file into a ScanEntry, or None if it must be skipped."""
        try:
            stat_result = file_path.lstat()
        except OSError as e:
            logging.warning(f"FolderScanner - Could not stat {file_path}: {e}")
            return None

        # Symlinks are not followed, only regular files are compared
        if not stat.S_ISREG(stat_result.st_mode):
            return None

        if stat_result.st_size > MAX_FILE_SIZE:
            logging.debug(f"FolderScanner - Skipping oversized file {file_path} ({stat_result.st_size} bytes)")
            return None

        try:
            data = file_path.read_bytes()
        except OSError as e:
            logging.warning(f"FolderScanner - Could not read {file_path}: {e}")
            return None

        try:
            content = data.decode(TEXT_ENCODING)
        except UnicodeDecodeError:
            logging.debug(f"FolderScanner - Skipping non-text file {file_path}")
            return None

        return ScanEntry(
            relative_path=self._relative(file_path, root_path),
            absolute_path=str(file_path),
            content=content,
        )

    @staticmethod
    def _relative(path: Path, root_path: Path) -> str:
        """Root-relative path with '/' separators on every platform."""
        return path.relative_to(root_path).as_posix()


def scan_dir(
    root: Path | str,
    ignore_names: Iterable[str] = ()
) -> tuple[dict[str, tuple[str, str]], list[str]]:
    """
    Scan ``root`` and return both outputs explicitly.

    Returns:
        (relative path -> (absolute path, content), pruned relative paths)
    """
    result = FolderScanner(ignore_names).scan(root)
    return result.as_mapping(), list(result.ignored_dirs)
