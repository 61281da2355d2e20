"""Front-matter block codec.

A note may start with a flat property block::

    ---
    tags: notes
    github_issue: 42
    ---
    Body text

Only single-level ``key: value`` lines are understood; nested YAML is carried
through as opaque lines. Everything here is a pure text transform.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

DELIMITER = "---"


@dataclass(frozen=True)
class FrontMatter:
    """Result of :func:`read_block`.

    ``lines`` is ``None`` when the note has no block. An empty block yields an
    empty list, which still counts as present.
    """

    lines: list[str] | None
    body_start: int | None = None

    @property
    def present(self) -> bool:
        return self.lines is not None


_ABSENT = FrontMatter(lines=None, body_start=None)


def read_block(text: str) -> FrontMatter:
    first, *rest = text.split("\n")
    if first != DELIMITER:
        return _ABSENT
    try:
        closing = rest.index(DELIMITER)
    except ValueError:
        # opening delimiter without a closing one: not a block
        return _ABSENT
    # ``closing`` indexes ``rest``; +1 for the opening line, +1 for the delimiter
    return FrontMatter(lines=rest[:closing], body_start=closing + 2)


def strip_block(text: str) -> str:
    block = read_block(text)
    if block.body_start is None:
        return text
    return "\n".join(text.split("\n")[block.body_start :])


def serialize_block(lines: Iterable[str]) -> str:
    return "\n".join([DELIMITER, *lines, DELIMITER])


def replace_block(text: str, block: str) -> str:
    """Put ``block`` in front of the body of ``text``, dropping any old block."""
    return f"{block}\n{strip_block(text)}"


def line_key(line: str) -> str | None:
    key, sep, _ = line.partition(":")
    if not sep:
        return None
    return key.strip()


def line_value(line: str) -> str:
    # everything after the first colon; values may contain colons themselves
    return line.partition(":")[2].strip()


def lookup(lines: Sequence[str] | None, key: str) -> str | None:
    if not lines:
        return None
    for line in lines:
        if line_key(line) == key:
            return line_value(line)
    return None


def merge_keys(
    existing_lines: Sequence[str] | None,
    updates: Mapping[str, str | None],
    removals: Iterable[str] = (),
) -> list[str]:
    """Replace known keys and keep unknown ones.

    Lines whose key is updated or removed are dropped; the remaining lines keep
    their order. One ``key: value`` line per defined update is then appended in
    the order ``updates`` yields them. A ``None`` update acts as a removal.
    """
    touched = set(updates) | set(removals)
    merged = [line for line in existing_lines or () if line_key(line) not in touched]
    for key, value in updates.items():
        if value is not None:
            merged.append(f"{key}: {value}")
    return merged


__all__ = [
    "DELIMITER",
    "FrontMatter",
    "line_key",
    "line_value",
    "lookup",
    "merge_keys",
    "read_block",
    "replace_block",
    "serialize_block",
    "strip_block",
]
