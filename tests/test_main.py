"""Tests for the command line entry point."""

import json
import logging
import os
import signal
import sys
import threading
from pathlib import Path

import pytest

import main
from diverge.core.folder.comparer import FolderComparer, CompareOptions, compare
from diverge.services.settings import SettingsManager


@pytest.fixture
def config(tmp_path: Path) -> str:
    return str(tmp_path / "settings.json")


def run(capsys, *argv: str) -> tuple[int, str, str]:
    code = main.main(list(argv))
    captured = capsys.readouterr()
    return code, captured.out, captured.err


def test_identical_trees_exit_zero(capsys, make_tree, config) -> None:
    left = make_tree("left", {"a.txt": "same"})
    right = make_tree("right", {"a.txt": "same"})

    code, out, _ = run(capsys, str(left), str(right), "-c", config)

    assert code == main.EXIT_IDENTICAL
    assert "✓ a.txt" in out
    assert "Files: 1, Identical: 1" in out


def test_different_trees_exit_one(capsys, make_tree, config) -> None:
    left = make_tree("left", {"a.txt": "one", "gone.txt": "x"})
    right = make_tree("right", {"a.txt": "two", "new.txt": "y"})

    code, out, _ = run(capsys, str(left), str(right), "-c", config)

    assert code == main.EXIT_DIFFERENT
    assert out.splitlines()[:3] == ["≠ a.txt", "← gone.txt", "→ new.txt"]
    assert ("Files: 3, Identical: 0, Different: 1, Left only: 1, Right only: 1"
            in out)


def test_missing_directory_is_usage_error(capsys, make_tree, tmp_path, config) -> None:
    right = make_tree("right", {})

    code, out, err = run(capsys, str(tmp_path / "missing"), str(right), "-c", config)

    assert code == main.EXIT_USAGE
    assert out == ""
    assert "Left path is not a directory" in err


def test_file_as_right_path_is_usage_error(capsys, make_tree, config) -> None:
    left = make_tree("left", {"a.txt": "a"})

    code, _, err = run(capsys, str(left), str(left / "a.txt"), "-c", config)

    assert code == main.EXIT_USAGE
    assert "Right path is not a directory" in err


def test_json_report_without_content(capsys, make_tree, config) -> None:
    left = make_tree("left", {"a.txt": "one"})
    right = make_tree("right", {"a.txt": "two"})

    _, out, _ = run(capsys, str(left), str(right), "-c", config, "--json")
    data = json.loads(out)

    assert data['total'] == 1
    assert data['different'] == 1
    assert data['entries'][0]['rel_path'] == "a.txt"
    assert data['entries'][0]['status'] == "different"
    assert 'left_content' not in data['entries'][0]


def test_json_report_with_content(capsys, make_tree, config) -> None:
    left = make_tree("left", {"a.txt": "one"})
    right = make_tree("right", {})

    _, out, _ = run(capsys, str(left), str(right), "-c", config, "--json", "--with-content")
    entry = json.loads(out)['entries'][0]

    assert entry['status'] == "only_left"
    assert entry['left_content'] == "one"
    assert entry['right_content'] == ""


def test_only_differences_hides_identical(capsys, make_tree, config) -> None:
    left = make_tree("left", {"a.txt": "a", "b.txt": "1"})
    right = make_tree("right", {"a.txt": "a", "b.txt": "2"})

    _, out, _ = run(capsys, str(left), str(right), "-c", config, "-d")

    assert "a.txt" not in out
    assert "≠ b.txt" in out
    assert "Identical: 1" in out


def test_ignore_option_prunes_and_reports(capsys, make_tree, config) -> None:
    left = make_tree("left", {"a.txt": "a", "dist/x.js": "1"})
    right = make_tree("right", {"a.txt": "a"})

    code, out, _ = run(capsys, str(left), str(right), "-c", config,
                       "--no-default-ignores", "--ignore", "dist")

    assert code == main.EXIT_IDENTICAL
    assert "dist/x.js" not in out
    assert "Ignored: dist" in out


def test_configured_ignores_apply_by_default(capsys, make_tree, config) -> None:
    left = make_tree("left", {"a.txt": "a", "node_modules/pkg/index.js": "x"})
    right = make_tree("right", {"a.txt": "a"})

    code, out, _ = run(capsys, str(left), str(right), "-c", config)

    assert code == main.EXIT_IDENTICAL
    assert "Ignored: node_modules" in out


def test_no_default_ignores_compares_everything(capsys, make_tree, config) -> None:
    left = make_tree("left", {"a.txt": "a", "node_modules/pkg/index.js": "x"})
    right = make_tree("right", {"a.txt": "a"})

    code, out, _ = run(capsys, str(left), str(right), "-c", config, "--no-default-ignores")

    assert code == main.EXIT_DIFFERENT
    assert "← node_modules/pkg/index.js" in out


def test_comparison_is_remembered(capsys, make_tree, config) -> None:
    left = make_tree("left", {})
    right = make_tree("right", {})

    run(capsys, str(left), str(right), "-c", config)

    recent = SettingsManager(Path(config)).settings.recent_comparisons
    assert len(recent) == 1
    assert recent[0].left_dir == str(left.resolve())
    assert recent[0].right_dir == str(right.resolve())


def test_effective_ignore_dirs_merges_without_duplicates(config) -> None:
    settings = SettingsManager(Path(config))
    settings.settings.ignore_dirs = [".git", "dist"]

    args = main.CommandLineArgs(ignore=["dist", "out"])
    assert main.effective_ignore_dirs(args, settings) == [".git", "dist", "out"]

    args = main.CommandLineArgs(ignore=["out"], no_default_ignores=True)
    assert main.effective_ignore_dirs(args, settings) == ["out"]


def test_parse_arguments_verbose_forces_debug() -> None:
    args = main.parse_arguments(["a", "b", "-v", "-i", "x", "-i", "y"])

    assert args.left_path == "a"
    assert args.right_path == "b"
    assert args.ignore == ["x", "y"]
    assert args.log_level == "DEBUG"


def test_resolve_path_expands_home(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "proj").mkdir()
    monkeypatch.setenv("HOME", str(tmp_path))

    assert main.resolve_path("~/proj") == str((tmp_path / "proj").resolve())


def test_resolve_path_relative_to_cwd(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "proj").mkdir()
    monkeypatch.chdir(tmp_path)

    assert main.resolve_path("proj") == str((tmp_path / "proj").resolve())
    assert main.resolve_path("missing") == str(tmp_path.resolve() / "missing")


def test_format_report_lists_ignored_dirs(make_tree) -> None:
    left = make_tree("left", {"a.txt": "a", ".git/HEAD": "ref"})
    right = make_tree("right", {"a.txt": "b", "build/out.o": "o"})

    report = main.format_report(compare(left, right, [".git", "build"]))

    assert report.splitlines() == [
        "≠ a.txt",
        "",
        "Files: 1, Identical: 0, Different: 1, Left only: 0, Right only: 0",
        "Ignored: .git, build",
    ]


def test_format_report_for_empty_trees(make_tree) -> None:
    report = main.format_report(compare(make_tree("left", {}), make_tree("right", {})))

    assert report == "Files: 0, Identical: 0, Different: 0, Left only: 0, Right only: 0"


def test_watch_returns_when_stopped(capsys, make_tree) -> None:
    left = make_tree("left", {"a.txt": "a"})
    right = make_tree("right", {"a.txt": "a"})
    comparer = FolderComparer(CompareOptions())
    stop = threading.Event()
    stop.set()
    worker = threading.Thread(
        target=main.watch,
        args=(comparer, str(left), str(right), main.CommandLineArgs(debounce=0.05),
              comparer.compare(str(left), str(right)), stop),
    )

    worker.start()
    worker.join(timeout=10)

    assert not worker.is_alive()


def test_display_path_escapes_undecodable_bytes() -> None:
    assert main.display_path("caf\udce9.txt") == "caf\\udce9.txt"
    assert main.display_path("café.txt") == "café.txt"


@pytest.mark.skipif(sys.platform != "linux", reason="needs a filesystem that accepts raw name bytes")
@pytest.mark.parametrize("extra", [[], ["--json"]])
def test_undecodable_file_name_prints_cleanly(capsys, make_tree, config, extra) -> None:
    left = make_tree("left", {})
    right = make_tree("right", {})
    name = os.fsdecode(b"caf\xe9.txt")
    (left / name).write_text("x")

    code, out, _ = run(capsys, str(left), str(right), "-c", config, *extra)

    assert code == main.EXIT_DIFFERENT
    # Must survive a strict UTF-8 stdout
    out.encode("utf-8")
    assert "caf\\udce9.txt" in out or "caf\\\\udce9.txt" in out


def test_signal_handler_stops_watch_and_logs(caplog) -> None:
    stop = threading.Event()
    handler = main.stop_on_signal(stop)

    with caplog.at_level(logging.INFO):
        handler(signal.SIGINT, None)

    assert stop.is_set()
    assert any(r.getMessage().startswith("main - Received signal") for r in caplog.records)
