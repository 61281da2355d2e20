from __future__ import annotations

from issuenote.errors import (
    IssueNoteError,
    MissingFileHandle,
    RenameFailure,
    StorageFailure,
    TransportFailure,
    redact,
)


def test_redact_tokens():
    sample = (
        "Token ghp_ABCDEFGHIJKLMNOPQRSTUVWX plus github_pat_1234567890abcdefghijkl "
        "and gho_ABCDEFGHIJKLMNOPQRSTUVWX"
    )
    out = redact(sample)
    assert 'ghp_' not in out
    assert 'github_pat_' not in out
    assert 'gho_' not in out
    assert out.count('<redacted>') == 3


def test_redact_bearer_header():
    assert redact('Authorization: Bearer abc.def') == 'Authorization: <redacted>'
    assert redact('') == ''


def test_error_messages_are_redacted():
    err = TransportFailure('request with ghp_ABCDEFGHIJKLMNOPQRSTUVWX failed', status=401)
    assert 'ghp_' not in str(err)
    assert err.status == 401


def test_error_hierarchy():
    for cls in (MissingFileHandle, TransportFailure, StorageFailure, RenameFailure):
        assert issubclass(cls, IssueNoteError)
    assert TransportFailure('x').status is None
