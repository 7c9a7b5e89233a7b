"""
Recursive change watching for compared directories.

Saving a file usually fires a burst of filesystem events, so events
are debounced: ``on_change`` runs once, ``debounce`` seconds after the
last event of a burst.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Iterable, Optional

from watchdog.events import (
    FileSystemEvent,
    FileSystemEventHandler,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    DirCreatedEvent,
    DirDeletedEvent,
    DirMovedEvent,
)
from watchdog.observers import Observer


WATCHED_EVENTS = [
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    DirCreatedEvent,
    DirDeletedEvent,
    DirMovedEvent,
]

DEFAULT_DEBOUNCE = 1.0


class _DebouncedHandler(FileSystemEventHandler):
    """Forwards every event to the owning watcher."""

    def __init__(self, watcher: 'DirectoryWatcher') -> None:
        self._watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        self._watcher.notify()


class DirectoryWatcher:
    """
    Watch one or more directory trees and report changes.

    Usage:
        with DirectoryWatcher([left, right], refresh):
            ...
    """

    def __init__(
        self,
        paths: Iterable[Path | str],
        on_change: Callable[[], None],
        debounce: float = DEFAULT_DEBOUNCE,
    ) -> None:
        self.paths: list[Path] = []
        for path in paths:
            resolved = Path(path).resolve()
            if resolved not in self.paths:
                self.paths.append(resolved)

        self._on_change = on_change
        self._debounce = debounce
        self._handler = _DebouncedHandler(self)
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._observer: Optional[Observer] = None
        self._stopped = False
        self.watched: list[Path] = []

    @property
    def handler(self) -> FileSystemEventHandler:
        return self._handler

    @property
    def is_running(self) -> bool:
        return self._observer is not None and not self._stopped

    def start(self) -> None:
        """Start watching. Paths that cannot be watched are skipped."""
        observer = Observer()

        for path in self.paths:
            if not path.is_dir():
                logging.warning(f"DirectoryWatcher - Not watching {path}: not a directory")
                continue
            try:
                observer.schedule(
                    self._handler,
                    str(path),
                    recursive=True,
                    event_filter=WATCHED_EVENTS,
                )
            except OSError as e:
                logging.warning(f"DirectoryWatcher - Failed to watch {path}: {e}")
                continue
            self.watched.append(path)

        observer.daemon = True
        observer.start()
        self._observer = observer
        self._stopped = False
        logging.debug(f"DirectoryWatcher - Watching {len(self.watched)} path(s)")

    def stop(self) -> None:
        """Stop watching and drop any pending notification."""
        with self._lock:
            self._stopped = True
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=1.0)
            self._observer = None

    def notify(self) -> None:
        """Restart the debounce timer."""
        with self._lock:
            if self._stopped:
                return
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._debounce, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            if self._stopped:
                return
            self._timer = None

        try:
            self._on_change()
        except Exception:
            logging.exception("DirectoryWatcher - Change callback failed")

    def __enter__(self) -> 'DirectoryWatcher':
        self.start()
        return self

    def __exit__(self, *args) -> None:
        self.stop()
