"""
File I/O service for reading and writing compared files.

Handles:
- Strict UTF-8 reads (the same decoding the scanner uses)
- Encoding hints for files that are not UTF-8
- Line ending detection
- Atomic writes with parent directory creation
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Optional

import chardet

from diverge.core.folder.scanner import MAX_FILE_SIZE, TEXT_ENCODING


class LineEnding(Enum):
    """Line ending style."""
    LF = auto()      # Unix: \n
    CRLF = auto()    # Windows: \r\n
    CR = auto()      # Old Mac: \r
    MIXED = auto()   # Mixed endings
    NONE = auto()    # No line endings (single line or empty)


@dataclass
class FileContent:
    """Container for file content with metadata."""
    content: str
    line_ending: LineEnding
    size: int


@dataclass
class ReadResult:
    """Result of a file read operation."""
    success: bool
    content: Optional[FileContent] = None
    error: Optional[str] = None
    is_binary: bool = False
    detected_encoding: Optional[str] = None


@dataclass
class WriteResult:
    """Result of a file write operation."""
    success: bool
    bytes_written: int = 0
    error: Optional[str] = None


class FileIOService:
    """Service for safe file I/O operations."""

    def __init__(self, max_text_size: int = MAX_FILE_SIZE):
        self.max_text_size = max_text_size

    def read_file(self, path: Path | str) -> ReadResult:
        """
        Read a text file as UTF-8.

        Content is returned exactly as decoded; line endings are
        reported but never converted.
        """
        path = Path(path)

        if not path.exists():
            return ReadResult(success=False, error=f"File not found: {path}")

        if not path.is_file():
            return ReadResult(success=False, error=f"Not a file: {path}")

        try:
            file_size = path.stat().st_size
            if file_size > self.max_text_size:
                return ReadResult(
                    success=False,
                    error=f"File too large for text comparison ({file_size / 1024 / 1024:.2f} MB). "
                          f"Max size is {self.max_text_size / 1024 / 1024:.2f} MB."
                )

            raw_content = path.read_bytes()
        except PermissionError:
            return ReadResult(success=False, error=f"Permission denied: {path}")
        except OSError as e:
            return ReadResult(success=False, error=f"OS error: {e}")

        try:
            content = raw_content.decode(TEXT_ENCODING)
        except UnicodeDecodeError:
            detected = self._detect_encoding(raw_content)
            hint = f" (looks like {detected})" if detected else ""
            logging.debug(f"FileIOService - {path} is not valid UTF-8{hint}")
            return ReadResult(
                success=False,
                is_binary=True,
                detected_encoding=detected,
                error=f"File is not valid UTF-8 text{hint}: {path}",
            )

        return ReadResult(
            success=True,
            content=FileContent(
                content=content,
                line_ending=self._detect_line_ending(content),
                size=len(raw_content),
            ),
            detected_encoding=TEXT_ENCODING,
        )

    def write_file(self, path: Path | str, content: str) -> WriteResult:
        """
        Write text content to a file, creating parent directories.

        The file is written to a temporary sibling and moved into
        place so readers never observe a partial file.
        """
        path = Path(path)
        encoded = content.encode(TEXT_ENCODING)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)

            fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
            try:
                with os.fdopen(fd, 'wb') as f:
                    f.write(encoded)
                os.replace(temp_path, path)
            except BaseException:
                if os.path.exists(temp_path):
                    os.unlink(temp_path)
                raise

            return WriteResult(success=True, bytes_written=len(encoded))

        except PermissionError:
            return WriteResult(success=False, error=f"Permission denied: {path}")
        except OSError as e:
            return WriteResult(success=False, error=f"Failed to write {path}: {e}")

    def _detect_encoding(self, content: bytes) -> Optional[str]:
        """Best guess at the encoding of non-UTF-8 content."""
        if not content:
            return None

        result = chardet.detect(content)
        if result['encoding'] and result['confidence'] > 0.5:
            return result['encoding'].lower()
        return None

    def _detect_line_ending(self, content: str) -> LineEnding:
        """Detect line ending style in content."""
        crlf_count = content.count('\r\n')
        lf_count = content.count('\n') - crlf_count
        cr_count = content.count('\r') - crlf_count

        if crlf_count == 0 and lf_count == 0 and cr_count == 0:
            return LineEnding.NONE

        total = crlf_count + lf_count + cr_count

        if crlf_count == total:
            return LineEnding.CRLF
        elif lf_count == total:
            return LineEnding.LF
        elif cr_count == total:
            return LineEnding.CR
        else:
            return LineEnding.MIXED
