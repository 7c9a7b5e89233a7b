"""
Core data models for the directory comparison engine.

This module defines the data structures shared by the scanner,
the comparer and everything that consumes a comparison:
- Scan models (one side of a comparison)
- Compare models (the merged, classified report)
- Status enumerations

All models are designed to be:
- UI-agnostic (can be used with any frontend)
- Serializable (``to_dict`` produces the JSON report shape)
- Immutable where practical
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional


# =============================================================================
# Enumerations
# =============================================================================

class CompareStatus(Enum):
    """Status of a relative path in a folder comparison."""
    IDENTICAL = "identical"      # Present on both sides, same content
    DIFFERENT = "different"      # Present on both sides, content differs
    ONLY_LEFT = "only_left"      # Present only in the left tree
    ONLY_RIGHT = "only_right"    # Present only in the right tree

    @property
    def icon(self) -> str:
        return STATUS_ICONS[self.value]

    @property
    def label(self) -> str:
        return STATUS_LABELS[self.value]


class EffectiveStatus(Enum):
    """Status of an entry once pending edits are taken into account."""
    IDENTICAL = "identical"
    DIFFERENT = "different"
    ONLY_LEFT = "only_left"
    ONLY_RIGHT = "only_right"
    APPLIED = "applied"          # Right side edited to match left, not saved

    @classmethod
    def from_status(cls, status: CompareStatus) -> 'EffectiveStatus':
        return cls(status.value)

    @property
    def icon(self) -> str:
        return STATUS_ICONS[self.value]

    @property
    def label(self) -> str:
        return STATUS_LABELS[self.value]


STATUS_ICONS = {
    "identical": "✓",
    "applied": "✓",
    "different": "≠",
    "only_left": "←",
    "only_right": "→",
}

STATUS_LABELS = {
    "identical": "Identical",
    "applied": "Applied (unsaved)",
    "different": "Different",
    "only_left": "Only in left",
    "only_right": "Only in right",
}


# =============================================================================
# Scan Models
# =============================================================================

@dataclass(frozen=True)
class ScanEntry:
    """A readable text file found under a scan root."""
    relative_path: str
    absolute_path: str
    content: str


@dataclass
class ScanResult:
    """Result of scanning one side of a comparison."""
    root_path: str
    files: dict[str, ScanEntry] = field(default_factory=dict)  # Relative path -> entry
    ignored_dirs: list[str] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.files)

    def get(self, relative_path: str) -> Optional[ScanEntry]:
        """Get the entry for a relative path."""
        return self.files.get(relative_path)

    def as_mapping(self) -> dict[str, tuple[str, str]]:
        """Relative path -> (absolute path, content)."""
        return {
            rel_path: (entry.absolute_path, entry.content)
            for rel_path, entry in self.files.items()
        }


# =============================================================================
# Compare Models
# =============================================================================

@dataclass(frozen=True)
class CompareEntry:
    """
    Comparison of a single relative path.

    Content and path fields are empty strings for the side
    where the file is absent.
    """
    rel_path: str
    status: CompareStatus
    left_content: str = ""
    right_content: str = ""
    left_path: str = ""
    right_path: str = ""

    @property
    def name(self) -> str:
        """File name without folder."""
        return self.rel_path.rsplit('/', 1)[-1]

    @property
    def folder(self) -> str:
        """Folder part of the relative path, '.' for top-level files."""
        if '/' not in self.rel_path:
            return "."
        return self.rel_path.rsplit('/', 1)[0]

    @property
    def exists_left(self) -> bool:
        return self.status != CompareStatus.ONLY_RIGHT

    @property
    def exists_right(self) -> bool:
        return self.status != CompareStatus.ONLY_LEFT

    @property
    def is_identical(self) -> bool:
        return self.status == CompareStatus.IDENTICAL

    def to_dict(self, include_content: bool = True) -> dict:
        data = {
            'rel_path': self.rel_path,
            'status': self.status.value,
            'left_path': self.left_path,
            'right_path': self.right_path,
        }
        if include_content:
            data['left_content'] = self.left_content
            data['right_content'] = self.right_content
        return data


@dataclass
class CompareResult:
    """Complete result of a folder comparison."""
    entries: list[CompareEntry] = field(default_factory=list)
    total: int = 0
    identical: int = 0
    different: int = 0
    only_left: int = 0
    only_right: int = 0
    ignored_dirs: list[str] = field(default_factory=list)
    left_path: str = ""
    right_path: str = ""
    compare_time: float = field(default=0.0, compare=False)  # Seconds

    @property
    def total_differences(self) -> int:
        """Number of entries that are not identical."""
        return self.different + self.only_left + self.only_right

    @property
    def is_identical(self) -> bool:
        """Check if both trees hold the same readable files."""
        return self.total_differences == 0

    @property
    def summary(self) -> str:
        return (f"Files: {self.total}, Identical: {self.identical}, "
                f"Different: {self.different}, Left only: {self.only_left}, "
                f"Right only: {self.only_right}")

    def iter_by_status(self, status: CompareStatus) -> Iterator[CompareEntry]:
        """Iterate over entries with the given status."""
        for entry in self.entries:
            if entry.status == status:
                yield entry

    def get_entry(self, rel_path: str) -> Optional[CompareEntry]:
        for entry in self.entries:
            if entry.rel_path == rel_path:
                return entry
        return None

    def to_dict(self, include_content: bool = True) -> dict:
        """Convert to the JSON report shape."""
        return {
            'left_path': self.left_path,
            'right_path': self.right_path,
            'entries': [e.to_dict(include_content) for e in self.entries],
            'total': self.total,
            'identical': self.identical,
            'different': self.different,
            'only_left': self.only_left,
            'only_right': self.only_right,
            'ignored_dirs': list(self.ignored_dirs),
        }
