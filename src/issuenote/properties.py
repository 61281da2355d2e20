"""Tracked GitHub properties layered on the front-matter codec.

Three keys link a note to an issue: ``github_issue``, ``github_repo`` and
``github_issue_title``. :func:`write_all_tracked_properties` is the one
mutation path; the single-field setters delegate to it so that updating one
key always re-asserts the other two.
"""

from __future__ import annotations

import re

from .frontmatter import lookup, merge_keys, read_block, replace_block, serialize_block

ISSUE_KEY = "github_issue"
REPO_KEY = "github_repo"
TITLE_KEY = "github_issue_title"

TRACKED_KEYS = (ISSUE_KEY, REPO_KEY, TITLE_KEY)

_SPECIAL_CHARS = frozenset(":`'\"{}[]|><!?*&$%@#\\\n")
_ESCAPE_RE = re.compile(r'\\(["\\n])')
_UNESCAPED = {'"': '"', "\\": "\\", "n": "\n"}


def needs_quoting(value: str) -> bool:
    return value != value.strip() or any(ch in _SPECIAL_CHARS for ch in value)


def escape_title(value: str) -> str:
    """Quote a title so it survives as a single front-matter line."""
    if not needs_quoting(value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def unescape_title(raw: str) -> str:
    if len(raw) >= 2 and raw.startswith('"') and raw.endswith('"'):
        return _ESCAPE_RE.sub(lambda m: _UNESCAPED[m.group(1)], raw[1:-1])
    return raw


def _read(text: str, key: str) -> str | None:
    return lookup(read_block(text).lines, key)


def _decimal_or_none(value: str | None) -> str | None:
    return value if value and value.isascii() and value.isdigit() else None


def get_issue_id(text: str) -> str | None:
    return _decimal_or_none(_read(text, ISSUE_KEY))


def get_repo_override(text: str) -> str | None:
    return _read(text, REPO_KEY) or None


def get_issue_title(text: str) -> str | None:
    raw = _read(text, TITLE_KEY)
    if not raw:
        return None
    return unescape_title(raw)


def write_all_tracked_properties(
    text: str,
    *,
    issue_id: str | None = None,
    repo_override: str | None = None,
    issue_title: str | None = None,
) -> str:
    """Return the front-matter block of ``text`` with all tracked keys written.

    For each field, ``None`` keeps whatever the note already holds while an
    empty string clears the key. Untracked keys keep their text and order and
    are emitted before the tracked ones.
    """
    lines = read_block(text).lines

    if issue_id is not None:
        issue_id = issue_id.strip()
        if issue_id and _decimal_or_none(issue_id) is None:
            raise ValueError(f"Issue id must be a decimal number, got {issue_id!r}")
    if repo_override is not None:
        repo_override = repo_override.strip()
    if issue_title is not None:
        issue_title = escape_title(issue_title) if issue_title else ""

    updates: dict[str, str | None] = {}
    for key, supplied in (
        (ISSUE_KEY, issue_id),
        (REPO_KEY, repo_override),
        (TITLE_KEY, issue_title),
    ):
        # carried values are copied raw so an already quoted title stays quoted once
        value = supplied if supplied is not None else lookup(lines, key)
        if key == ISSUE_KEY:
            # a carried id that is not a number counts as absent
            value = _decimal_or_none(value)
        updates[key] = value or None
    return serialize_block(merge_keys(lines, updates))


def apply_tracked_properties(
    text: str,
    *,
    issue_id: str | None = None,
    repo_override: str | None = None,
    issue_title: str | None = None,
) -> str:
    """Like :func:`write_all_tracked_properties` but return the whole note."""
    block = write_all_tracked_properties(
        text, issue_id=issue_id, repo_override=repo_override, issue_title=issue_title
    )
    return replace_block(text, block)


def set_issue_id(text: str, issue_id: str) -> str:
    return write_all_tracked_properties(text, issue_id=issue_id)


def set_repo_override(text: str, repo_override: str) -> str:
    return write_all_tracked_properties(text, repo_override=repo_override)


def set_issue_title(text: str, issue_title: str) -> str:
    return write_all_tracked_properties(text, issue_title=issue_title)


__all__ = [
    "ISSUE_KEY",
    "REPO_KEY",
    "TITLE_KEY",
    "TRACKED_KEYS",
    "apply_tracked_properties",
    "escape_title",
    "get_issue_id",
    "get_issue_title",
    "get_repo_override",
    "needs_quoting",
    "set_issue_id",
    "set_issue_title",
    "set_repo_override",
    "unescape_title",
    "write_all_tracked_properties",
]
