"""
Folder comparison module.

Provides functionality for:
- Recursive directory scanning with ignored-name pruning
- Folder-to-folder comparison
"""

from diverge.core.folder.scanner import (
    FolderScanner,
    MAX_FILE_SIZE,
    scan_dir,
)
from diverge.core.folder.comparer import (
    FolderComparer,
    CompareOptions,
    compare,
)

__all__ = [
    # Scanner
    'FolderScanner',
    'MAX_FILE_SIZE',
    'scan_dir',
    # Comparer
    'FolderComparer',
    'CompareOptions',
    'compare',
]
