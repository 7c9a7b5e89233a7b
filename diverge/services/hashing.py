"""
Fingerprints for comparison results.

A fingerprint changes whenever anything a user would see in the
report changes: paths, statuses, contents or ignored directories.
Timing and root paths are not part of it.
"""

from __future__ import annotations

import xxhash

from diverge.core.models import CompareResult

# Field and record separators
_FIELD_SEP = b'\x00'
_RECORD_SEP = b'\x1e'


def fingerprint_text(text: str) -> str:
    """xxHash64 hex digest of a string."""
    return xxhash.xxh64(text.encode('utf-8', errors='surrogatepass')).hexdigest()


def fingerprint_result(result: CompareResult) -> str:
    """xxHash64 hex digest of a comparison report."""
    hasher = xxhash.xxh64()

    for entry in result.entries:
        for value in (
            entry.rel_path,
            entry.status.value,
            entry.left_content,
            entry.right_content,
        ):
            hasher.update(value.encode('utf-8', errors='surrogatepass'))
            hasher.update(_FIELD_SEP)
        hasher.update(_RECORD_SEP)

    for ignored in result.ignored_dirs:
        hasher.update(ignored.encode('utf-8', errors='surrogatepass'))
        hasher.update(_FIELD_SEP)

    return hasher.hexdigest()
