"""
Application settings management.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Callable, Optional


DEFAULT_IGNORE_DIRS = [
    '.git',
    'node_modules',
    '__pycache__',
    'venv',
    '.venv',
    'target',
    '.DS_Store',
    '.idea',
    '.vscode',
    'dist',
    'build',
    '.next',
    '.nuxt',
    'coverage',
    '.tox',
    '.mypy_cache',
    '.pytest_cache',
    '.cargo',
    '.terraform',
    'vendor',
]

RECENT_COMPARISONS_LIMIT = 10


@dataclass
class EditorPreferences:
    """Diff editor preferences."""
    minimap_enabled: bool = False
    show_full_content: bool = False
    sidebar_width: int = 280


@dataclass(frozen=True)
class RecentComparison:
    """A previously compared pair of directories."""
    left_dir: str
    right_dir: str


@dataclass
class ApplicationSettings:
    """Main application settings container."""
    ignore_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_DIRS))
    editor: EditorPreferences = field(default_factory=EditorPreferences)
    recent_comparisons: list[RecentComparison] = field(default_factory=list)


class SettingsManager:
    """Manager for loading/saving application settings."""

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = Path(settings_path) if settings_path else self._get_default_path()
        self._settings: Optional[ApplicationSettings] = None
        self._observers: list[Callable[[ApplicationSettings], None]] = []

    @staticmethod
    def _get_default_path() -> Path:
        """Get the default settings file path."""
        if os.name == 'nt':
            # Windows
            app_data = os.environ.get('APPDATA', os.path.expanduser('~'))
            return Path(app_data) / 'Diverge' / 'settings.json'
        else:
            # Linux/Mac
            config_home = os.environ.get('XDG_CONFIG_HOME',
                                         os.path.expanduser('~/.config'))
            return Path(config_home) / 'diverge' / 'settings.json'

    @property
    def settings(self) -> ApplicationSettings:
        """Get current settings, loading from disk if needed."""
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self) -> ApplicationSettings:
        """
        Load settings from disk.

        A missing file is created with the defaults. A file that
        cannot be read or parsed falls back to the defaults without
        being overwritten.
        """
        if not self.settings_path.exists():
            settings = ApplicationSettings()
            self._settings = settings
            self.save(settings)
            return settings

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            settings = self._from_dict(data)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logging.warning(f"SettingsManager - Could not load {self.settings_path}, using defaults: {e}")
            settings = ApplicationSettings()

        self._settings = settings
        return settings

    def save(self, settings: Optional[ApplicationSettings] = None) -> bool:
        """Save settings to disk."""
        settings = settings or self._settings
        if settings is None:
            return False

        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self.settings_path, 'w', encoding='utf-8') as f:
                json.dump(self._to_dict(settings), f, indent=2)

            self._settings = settings
            self._notify_observers()
            return True

        except OSError as e:
            logging.error(f"SettingsManager - Could not save {self.settings_path}: {e}")
            return False

    def reset(self) -> ApplicationSettings:
        """Reset to default settings."""
        self._settings = ApplicationSettings()
        self.save()
        return self._settings

    def add_observer(self, callback: Callable[[ApplicationSettings], None]) -> None:
        """Add a callback to be notified of settings changes."""
        self._observers.append(callback)

    def remove_observer(self, callback: Callable[[ApplicationSettings], None]) -> None:
        """Remove a settings change observer."""
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify_observers(self) -> None:
        """Notify all observers of settings change."""
        for callback in self._observers:
            try:
                callback(self._settings)
            except Exception:
                logging.exception("SettingsManager - Settings observer failed")

    def ignore_dirs_snapshot(self) -> tuple[str, ...]:
        """Immutable copy of the ignore list to hand to a comparison."""
        return tuple(self.settings.ignore_dirs)

    def add_ignore_dir(self, name: str) -> bool:
        """Add an ignore rule. Blank and duplicate names are rejected."""
        name = name.strip()
        settings = self.settings
        if not name or name in settings.ignore_dirs:
            return False

        settings.ignore_dirs.append(name)
        return self.save()

    def remove_ignore_dir(self, name: str) -> bool:
        settings = self.settings
        if name not in settings.ignore_dirs:
            return False

        settings.ignore_dirs = [d for d in settings.ignore_dirs if d != name]
        return self.save()

    def edit_ignore_dir(self, old_name: str, new_name: str) -> bool:
        """Rename an ignore rule in place."""
        new_name = new_name.strip()
        settings = self.settings
        if not new_name or new_name == old_name or new_name in settings.ignore_dirs:
            return False
        if old_name not in settings.ignore_dirs:
            return False

        settings.ignore_dirs = [new_name if d == old_name else d for d in settings.ignore_dirs]
        return self.save()

    def update_editor(self, **changes: Any) -> bool:
        """Update editor preferences by field name."""
        editor = self.settings.editor
        for key, value in changes.items():
            if not hasattr(editor, key):
                raise AttributeError(f"Unknown editor preference: {key}")
            setattr(editor, key, value)
        return self.save()

    def add_recent_comparison(self, left_dir: str, right_dir: str) -> None:
        """Move a directory pair to the front of the recent list."""
        settings = self.settings
        pair = RecentComparison(left_dir, right_dir)

        recent = [r for r in settings.recent_comparisons if r != pair]
        recent.insert(0, pair)
        settings.recent_comparisons = recent[:RECENT_COMPARISONS_LIMIT]

        self.save()

    def remove_recent_comparison(self, left_dir: str, right_dir: str) -> None:
        settings = self.settings
        pair = RecentComparison(left_dir, right_dir)
        settings.recent_comparisons = [r for r in settings.recent_comparisons if r != pair]
        self.save()

    def _to_dict(self, settings: ApplicationSettings) -> dict:
        """Convert settings to dictionary for JSON serialization."""
        return asdict(settings)

    def _from_dict(self, data: dict) -> ApplicationSettings:
        """Convert dictionary back to settings objects."""
        editor_data = data.get('editor', {})
        defaults = EditorPreferences()

        editor = EditorPreferences(
            minimap_enabled=bool(editor_data.get('minimap_enabled', defaults.minimap_enabled)),
            show_full_content=bool(editor_data.get('show_full_content', defaults.show_full_content)),
            sidebar_width=int(editor_data.get('sidebar_width', defaults.sidebar_width)),
        )

        recent = [
            RecentComparison(item['left_dir'], item['right_dir'])
            for item in data.get('recent_comparisons', [])
            if isinstance(item, dict) and 'left_dir' in item and 'right_dir' in item
        ]

        return ApplicationSettings(
            ignore_dirs=[str(d) for d in data.get('ignore_dirs', DEFAULT_IGNORE_DIRS)],
            editor=editor,
            recent_comparisons=recent[:RECENT_COMPARISONS_LIMIT],
        )
