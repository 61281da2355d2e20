"""Error taxonomy & redaction.

Every sync operation fails with an :class:`IssueNoteError` subclass whose
message is safe to show to the user. Collaborator exceptions are chained via
``raise ... from exc`` so the original cause stays available for debugging.

A front-matter block with an opening delimiter but no closing one is not an
error: the codec reports it as "no block".
"""

from __future__ import annotations

import re

# Simple token patterns; can be expanded (e.g., GitHub App installation tokens)
_SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"ghp_[A-Za-z0-9]{20,40}"),  # GitHub classic tokens
    re.compile(r"github_pat_\w{20,}"),  # GitHub fine-grained tokens
    re.compile(r"gh[osu]_[A-Za-z0-9]{20,40}"),  # OAuth / user-to-server tokens
    re.compile(r"Bearer\s+\S+", re.IGNORECASE),
]

_REDACTION_PLACEHOLDER = "<redacted>"


def redact(text: str) -> str:
    """Redact sensitive tokens in arbitrary text."""
    if not text:
        return text
    redacted = text
    for pat in _SENSITIVE_PATTERNS:
        redacted = pat.sub(_REDACTION_PLACEHOLDER, redacted)
    return redacted


class IssueNoteError(RuntimeError):
    """Base class for operation-level failures."""

    def __init__(self, message: str) -> None:
        super().__init__(redact(message))


class MissingFileHandle(IssueNoteError):
    """The operation needs a concrete file but the document has none."""


class TransportFailure(IssueNoteError):
    """The issue tracker answered with an unexpected status or was unreachable."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class StorageFailure(IssueNoteError):
    """Reading or writing the note failed."""


class RenameFailure(IssueNoteError):
    """Renaming a note failed; callers treat this as a warning."""


__all__ = [
    "IssueNoteError",
    "MissingFileHandle",
    "RenameFailure",
    "StorageFailure",
    "TransportFailure",
    "redact",
]
