"""
Pending right-side edits on top of a comparison result.

Edits are held in memory, keyed by relative path, until they are
saved through the file I/O service. Saving writes the right side
only; the left tree is treated as the reference.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, TYPE_CHECKING

from diverge.core.models import (
    CompareEntry,
    CompareResult,
    CompareStatus,
    EffectiveStatus,
)

if TYPE_CHECKING:
    from diverge.services.file_io import FileIOService


class ModificationTracker:
    """Tracks unsaved edits to right-side files of a comparison."""

    def __init__(self, result: CompareResult, right_root: Path | str):
        self.result = result
        self.right_root = Path(right_root)
        self._pending: dict[str, str] = {}

    @property
    def pending(self) -> dict[str, str]:
        """Copy of the pending edits (relative path -> new content)."""
        return dict(self._pending)

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    def effective_status(self, entry: CompareEntry) -> EffectiveStatus:
        """Status of an entry with its pending edit applied."""
        content = self._pending.get(entry.rel_path)
        if content is None:
            return EffectiveStatus.from_status(entry.status)
        if content == entry.left_content:
            return EffectiveStatus.APPLIED
        return EffectiveStatus.DIFFERENT

    def update(self, rel_path: str, content: str) -> None:
        """Record an edit made to the right side of ``rel_path``."""
        self._pending[rel_path] = content

    def discard(self, rel_path: str) -> None:
        self._pending.pop(rel_path, None)

    def reset(self) -> None:
        self._pending.clear()

    def apply_left_to_right(self, rel_path: str) -> bool:
        """Stage the left content as the new right content."""
        entry = self.result.get_entry(rel_path)
        if entry is None:
            return False
        self._pending[rel_path] = entry.left_content
        return True

    def apply_all_to_right(self) -> int:
        """Stage left content for every differing file."""
        return self.apply_selected_to_right(
            entry.rel_path for entry in self.result.iter_by_status(CompareStatus.DIFFERENT)
        )

    def apply_selected_to_right(self, rel_paths: Iterable[str]) -> int:
        """Stage left content for the selected files that differ."""
        selected = set(rel_paths)
        count = 0
        for entry in self.result.iter_by_status(CompareStatus.DIFFERENT):
            if entry.rel_path in selected:
                self._pending[entry.rel_path] = entry.left_content
                count += 1
        return count

    def target_path(self, entry: CompareEntry) -> Path:
        """Where the right side of ``entry`` is written."""
        if entry.right_path:
            return Path(entry.right_path)
        return self.right_root / entry.rel_path

    def save(self, rel_path: str, file_io: 'FileIOService') -> bool:
        """Write one pending edit. Returns True if it was written."""
        content = self._pending.get(rel_path)
        entry: Optional[CompareEntry] = self.result.get_entry(rel_path)
        if content is None or entry is None:
            return False

        write_result = file_io.write_file(self.target_path(entry), content)
        if not write_result.success:
            logging.error(f"ModificationTracker - Failed to save {rel_path}: {write_result.error}")
            return False

        del self._pending[rel_path]
        return True

    def save_all(self, file_io: 'FileIOService') -> int:
        """Write every pending edit. Returns the number saved."""
        saved = 0
        for rel_path in sorted(self._pending):
            if self.save(rel_path, file_io):
                saved += 1
        return saved
