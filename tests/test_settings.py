"""Tests for settings persistence."""

import json
from pathlib import Path

from diverge.services.settings import (
    DEFAULT_IGNORE_DIRS,
    RECENT_COMPARISONS_LIMIT,
    RecentComparison,
    SettingsManager,
)


def test_missing_file_writes_defaults(tmp_path: Path) -> None:
    path = tmp_path / "conf" / "settings.json"
    manager = SettingsManager(path)

    settings = manager.settings

    assert path.exists()
    for name in (".git", "node_modules", "__pycache__", "target", "vendor"):
        assert name in settings.ignore_dirs
    assert settings.editor.minimap_enabled is False
    assert settings.editor.sidebar_width == 280


def test_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    manager = SettingsManager(path)
    manager.settings.ignore_dirs = [".git", "node_modules"]
    manager.settings.editor.minimap_enabled = True
    manager.save()

    loaded = SettingsManager(path).settings

    assert loaded.ignore_dirs == [".git", "node_modules"]
    assert loaded.editor.minimap_enabled is True


def test_missing_sections_use_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({'ignore_dirs': [".git", "node_modules"]}))

    settings = SettingsManager(path).settings

    assert len(settings.ignore_dirs) == 2
    assert settings.editor.minimap_enabled is False
    assert settings.recent_comparisons == []


def test_empty_ignore_list_is_kept(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({'ignore_dirs': []}))

    assert SettingsManager(path).settings.ignore_dirs == []


def test_corrupt_file_falls_back_without_overwriting(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json")

    settings = SettingsManager(path).settings

    assert settings.ignore_dirs == DEFAULT_IGNORE_DIRS
    assert path.read_text() == "{not json"


def test_add_ignore_dir(tmp_path: Path) -> None:
    manager = SettingsManager(tmp_path / "settings.json")
    manager.settings.ignore_dirs = [".git"]

    assert manager.add_ignore_dir("  out  ")
    assert not manager.add_ignore_dir("out")
    assert not manager.add_ignore_dir("   ")

    assert SettingsManager(tmp_path / "settings.json").settings.ignore_dirs == [".git", "out"]


def test_remove_and_edit_ignore_dir(tmp_path: Path) -> None:
    manager = SettingsManager(tmp_path / "settings.json")
    manager.settings.ignore_dirs = [".git", "dist", "build"]

    assert manager.edit_ignore_dir("dist", "out")
    assert not manager.edit_ignore_dir("build", ".git")
    assert not manager.edit_ignore_dir("missing", "other")
    assert manager.remove_ignore_dir("build")
    assert not manager.remove_ignore_dir("build")

    assert manager.settings.ignore_dirs == [".git", "out"]


def test_ignore_dirs_snapshot_is_immutable_copy(tmp_path: Path) -> None:
    manager = SettingsManager(tmp_path / "settings.json")
    snapshot = manager.ignore_dirs_snapshot()

    manager.add_ignore_dir("later")

    assert isinstance(snapshot, tuple)
    assert "later" not in snapshot


def test_recent_comparisons(tmp_path: Path) -> None:
    manager = SettingsManager(tmp_path / "settings.json")

    manager.add_recent_comparison("/a", "/b")
    manager.add_recent_comparison("/c", "/d")
    manager.add_recent_comparison("/a", "/b")

    assert manager.settings.recent_comparisons == [
        RecentComparison("/a", "/b"),
        RecentComparison("/c", "/d"),
    ]

    manager.remove_recent_comparison("/c", "/d")
    reloaded = SettingsManager(tmp_path / "settings.json").settings
    assert reloaded.recent_comparisons == [RecentComparison("/a", "/b")]


def test_recent_comparisons_are_capped(tmp_path: Path) -> None:
    manager = SettingsManager(tmp_path / "settings.json")

    for i in range(RECENT_COMPARISONS_LIMIT + 5):
        manager.add_recent_comparison(f"/left{i}", f"/right{i}")

    recent = manager.settings.recent_comparisons
    assert len(recent) == RECENT_COMPARISONS_LIMIT
    assert recent[0] == RecentComparison(f"/left{RECENT_COMPARISONS_LIMIT + 4}",
                                         f"/right{RECENT_COMPARISONS_LIMIT + 4}")


def test_update_editor_and_observers(tmp_path: Path) -> None:
    manager = SettingsManager(tmp_path / "settings.json")
    seen = []
    manager.add_observer(seen.append)

    manager.update_editor(sidebar_width=320)

    assert seen and seen[-1].editor.sidebar_width == 320

    count = len(seen)
    manager.remove_observer(seen.append)
    manager.reset()
    assert len(seen) == count
    assert manager.settings.editor.sidebar_width == 280
