"""Terminal output helpers for the CLI - no external dependencies."""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from typing import TextIO

from .sync import IssueStatus, SyncVerdict


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"


def _supports_color(stream: TextIO | None = None) -> bool:
    stream = stream or sys.stdout
    if os.environ.get("NO_COLOR"):
        return False
    if not hasattr(stream, "isatty") or not stream.isatty():
        return False
    return os.environ.get("TERM") != "dumb"


def colorize(text: str, color: str, bold: bool = False, stream: TextIO | None = None) -> str:
    """Apply color to text if terminal supports it."""
    if not _supports_color(stream):
        return text
    prefix = (Colors.BOLD if bold else "") + color
    return f"{prefix}{text}{Colors.RESET}"


def _emit(marker: str, color: str, message: str, stream: TextIO) -> None:
    print(colorize(marker, color, bold=True, stream=stream) + " " + message, file=stream)


def print_success(message: str, stream: TextIO | None = None) -> None:
    _emit("✓", Colors.GREEN, message, stream or sys.stdout)


def print_error(message: str, stream: TextIO | None = None) -> None:
    _emit("✗", Colors.RED, message, stream or sys.stderr)


def print_warning(message: str, stream: TextIO | None = None) -> None:
    _emit("⚠", Colors.YELLOW, message, stream or sys.stderr)


def print_info(message: str, stream: TextIO | None = None) -> None:
    _emit("ℹ", Colors.BLUE, message, stream or sys.stdout)


def print_header(message: str, stream: TextIO | None = None) -> None:
    stream = stream or sys.stdout
    print(colorize(message, Colors.CYAN, bold=True, stream=stream), file=stream)


def print_fields(items: Sequence[tuple[str, str]], stream: TextIO | None = None) -> None:
    """Print aligned ``key: value`` rows."""
    stream = stream or sys.stdout
    width = max((len(k) for k, _ in items), default=0)
    for key, value in items:
        print(f"  {key.ljust(width)}  {value}", file=stream)


def verdict_message(status: IssueStatus) -> str:
    issue = f"#{status.issue_id}" if status.issue_id else "(untracked)"
    if status.verdict is SyncVerdict.PULL_AVAILABLE:
        return f"Issue {issue} has updates available to pull"
    if status.verdict is SyncVerdict.PUSH_AVAILABLE:
        return f"Your local changes to issue {issue} can be pushed"
    if status.verdict is SyncVerdict.UP_TO_DATE:
        return f"Issue {issue} is up-to-date"
    return f"Issue {issue} has not been fetched yet"


__all__ = [
    "Colors",
    "colorize",
    "print_error",
    "print_fields",
    "print_header",
    "print_info",
    "print_success",
    "print_warning",
    "verdict_message",
]
