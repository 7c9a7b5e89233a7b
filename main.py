"""
Main entry point for the diverge directory comparison tool.

This module handles:
- Command line argument parsing
- Logging configuration
- Path resolution and validation
- Report output (text or JSON)
- Watch mode
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import signal
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, TextIO

from diverge.core.folder.comparer import FolderComparer, CompareOptions
from diverge.core.models import CompareResult
from diverge.services.hashing import fingerprint_result
from diverge.services.settings import SettingsManager
from diverge.services.watcher import DirectoryWatcher, DEFAULT_DEBOUNCE


# =============================================================================
# Constants
# =============================================================================

APP_NAME = "diverge"
APP_VERSION = "0.1.0"

EXIT_IDENTICAL = 0
EXIT_DIFFERENT = 1
EXIT_USAGE = 2


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class CommandLineArgs:
    """Parsed command line arguments."""
    left_path: str = ""
    right_path: str = ""
    ignore: list[str] = field(default_factory=list)
    no_default_ignores: bool = False
    json_output: bool = False
    with_content: bool = False
    only_differences: bool = False
    watch: bool = False
    debounce: float = DEFAULT_DEBOUNCE
    config_file: Optional[str] = None
    log_level: str = "WARNING"


class UsageError(Exception):
    """Raised for invalid input paths."""


# =============================================================================
# Logging Setup
# =============================================================================

class LogFormatter(logging.Formatter):
    """Custom log formatter with colors for console."""

    COLORS = {
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True, stream: Optional[TextIO] = None):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        stream = stream or sys.stderr
        self.use_colors = use_colors and hasattr(stream, 'isatty') and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        if self.use_colors:
            color = self.COLORS.get(record.levelno, '')
            return f"{color}{formatted}{self.RESET}"

        return formatted


def setup_logging(level: str = "WARNING", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configure application logging.

    Logs go to stderr so stdout only carries the report.

    Args:
        level: Log level string
        log_file: Optional file path for logging

    Returns:
        Root logger instance
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(LogFormatter(use_colors=True, stream=sys.stderr))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(LogFormatter(use_colors=False))
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    logging.getLogger('watchdog').setLevel(logging.WARNING)

    return root_logger


# =============================================================================
# Command Line Parsing
# =============================================================================

def parse_arguments(args: Optional[List[str]] = None) -> CommandLineArgs:
    """
    Parse command line arguments.

    Args:
        args: Arguments to parse (defaults to sys.argv)

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Compare two directory trees file by file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s old/ new/                      Compare two folders
  %(prog)s old/ new/ --ignore dist        Also skip directories named dist
  %(prog)s old/ new/ --json               Machine readable report
  %(prog)s old/ new/ --watch              Re-compare whenever files change

Exit status is 0 when the trees match, 1 when they differ and 2 on error.
        """
    )

    parser.add_argument('left', help='Left folder to compare')
    parser.add_argument('right', help='Right folder to compare')

    # Ignore rules
    parser.add_argument(
        '-i', '--ignore',
        action='append',
        default=[],
        metavar='NAME',
        help='Directory name to skip at any depth (repeatable)'
    )
    parser.add_argument(
        '--no-default-ignores',
        action='store_true',
        help='Do not use the ignore list from the settings file'
    )

    # Output
    parser.add_argument(
        '--json',
        action='store_true',
        help='Print the report as JSON'
    )
    parser.add_argument(
        '--with-content',
        action='store_true',
        help='Include file contents in the JSON report'
    )
    parser.add_argument(
        '-d', '--only-differences',
        action='store_true',
        help='Leave identical files out of the report'
    )

    # Watch
    parser.add_argument(
        '-w', '--watch',
        action='store_true',
        help='Keep running and re-compare when either tree changes'
    )
    parser.add_argument(
        '--debounce',
        type=float,
        default=DEFAULT_DEBOUNCE,
        help='Seconds to wait after the last change before re-comparing'
    )

    # Configuration
    parser.add_argument(
        '-c', '--config',
        help='Settings file path'
    )

    # Logging
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default='WARNING',
        help='Log level'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'{APP_NAME} {APP_VERSION}'
    )

    parsed = parser.parse_args(args)

    return CommandLineArgs(
        left_path=parsed.left,
        right_path=parsed.right,
        ignore=parsed.ignore,
        no_default_ignores=parsed.no_default_ignores,
        json_output=parsed.json,
        with_content=parsed.with_content,
        only_differences=parsed.only_differences,
        watch=parsed.watch,
        debounce=parsed.debounce,
        config_file=parsed.config,
        log_level='DEBUG' if parsed.verbose else parsed.log_level,
    )


# =============================================================================
# Paths
# =============================================================================

def resolve_path(path: str) -> str:
    """
    Expand ``~/``, make absolute against the working directory and
    canonicalize when the path exists.
    """
    if path.startswith('~/'):
        home = os.environ.get('HOME')
        expanded = Path(home) / path[2:] if home else Path(path)
    else:
        expanded = Path(path)

    if not expanded.is_absolute():
        expanded = Path.cwd() / expanded

    try:
        return str(expanded.resolve(strict=True))
    except OSError:
        return str(expanded)


def validate_directories(left: str, right: str) -> None:
    """Raise UsageError unless both paths are directories."""
    if not Path(left).is_dir():
        raise UsageError(f"Left path is not a directory: {left}")
    if not Path(right).is_dir():
        raise UsageError(f"Right path is not a directory: {right}")


def effective_ignore_dirs(args: CommandLineArgs, settings: SettingsManager) -> list[str]:
    """Configured ignore names (unless disabled) plus command line ones."""
    names = [] if args.no_default_ignores else list(settings.ignore_dirs_snapshot())
    for name in args.ignore:
        if name not in names:
            names.append(name)
    return names


# =============================================================================
# Reporting
# =============================================================================

def display_path(path: str) -> str:
    """
    Printable form of a path.

    os.walk hands undecodable name bytes back as lone surrogates, which
    no strict stream can encode; they are shown as \\udcXX escapes.
    """
    return path.encode('utf-8', 'backslashreplace').decode('utf-8')


def format_report(result: CompareResult, only_differences: bool = False) -> str:
    """Human readable report, one line per file."""
    lines = []

    for entry in result.entries:
        if only_differences and entry.is_identical:
            continue
        lines.append(f"{entry.status.icon} {display_path(entry.rel_path)}")

    if lines:
        lines.append("")

    lines.append(result.summary)

    if result.ignored_dirs:
        lines.append(f"Ignored: {', '.join(display_path(d) for d in result.ignored_dirs)}")

    return '\n'.join(lines)


def render(result: CompareResult, args: CommandLineArgs) -> str:
    if args.json_output:
        data = result.to_dict(include_content=args.with_content)
        if args.only_differences:
            data['entries'] = [e for e in data['entries'] if e['status'] != 'identical']
        for key in ('left_path', 'right_path'):
            data[key] = display_path(data[key])
        for entry in data['entries']:
            for key in ('rel_path', 'left_path', 'right_path'):
                entry[key] = display_path(entry[key])
        data['ignored_dirs'] = [display_path(d) for d in data['ignored_dirs']]
        return json.dumps(data, indent=2, ensure_ascii=False)
    return format_report(result, args.only_differences)


# =============================================================================
# Watch Mode
# =============================================================================

def stop_on_signal(stop_event: threading.Event):
    """Signal handler that ends watch mode."""
    def on_signal(signum, frame) -> None:
        logging.info(f"main - Received signal {signum}, shutting down...")
        stop_event.set()
    return on_signal


def watch(
    comparer: FolderComparer,
    left: str,
    right: str,
    args: CommandLineArgs,
    initial: CompareResult,
    stop_event: Optional[threading.Event] = None,
) -> None:
    """Re-compare on change until interrupted, printing changed reports."""
    stop_event = stop_event or threading.Event()
    last_fingerprint = fingerprint_result(initial)
    lock = threading.Lock()

    def refresh() -> None:
        nonlocal last_fingerprint
        with lock:
            result = comparer.compare(left, right)
            fingerprint = fingerprint_result(result)
            if fingerprint == last_fingerprint:
                logging.debug("main - Change detected, report unchanged")
                return
            last_fingerprint = fingerprint

        print(render(result, args), flush=True)

    on_signal = stop_on_signal(stop_event)

    if threading.current_thread() is threading.main_thread():
        signal.signal(signal.SIGINT, on_signal)
        if sys.platform != 'win32':
            signal.signal(signal.SIGTERM, on_signal)

    with DirectoryWatcher([left, right], refresh, debounce=args.debounce):
        while not stop_event.wait(0.5):
            pass


# =============================================================================
# Main Function
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """
    Application main entry point.

    Returns:
        Exit code (0 identical, 1 different, 2 error)
    """
    args = parse_arguments(argv)

    setup_logging(args.log_level)
    logging.info(f"main - Starting {APP_NAME} v{APP_VERSION}")

    left = resolve_path(args.left_path)
    right = resolve_path(args.right_path)

    try:
        validate_directories(left, right)
    except UsageError as e:
        print(f"{APP_NAME}: error: {display_path(str(e))}", file=sys.stderr)
        return EXIT_USAGE

    settings = SettingsManager(Path(args.config_file) if args.config_file else None)
    ignore_dirs = effective_ignore_dirs(args, settings)

    comparer = FolderComparer(CompareOptions(ignore_dirs=ignore_dirs))
    result = comparer.compare(left, right)

    settings.add_recent_comparison(left, right)

    print(render(result, args))

    if args.watch:
        watch(comparer, left, right, args, result)

    return EXIT_IDENTICAL if result.is_identical else EXIT_DIFFERENT


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == '__main__':
    sys.exit(main())
