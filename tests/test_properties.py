from __future__ import annotations

import pytest

from issuenote.frontmatter import read_block
from issuenote.properties import (
    apply_tracked_properties,
    escape_title,
    get_issue_id,
    get_issue_title,
    get_repo_override,
    set_issue_id,
    set_issue_title,
    set_repo_override,
    unescape_title,
    write_all_tracked_properties,
)

TRACKED_NOTE = (
    "---\n"
    "tags: notes\n"
    "github_issue: 12\n"
    "github_repo: acme/widgets\n"
    "github_issue_title: Crash on start\n"
    "foo: bar\n"
    "---\n"
    "Body"
)


def test_readers_on_tracked_note():
    assert get_issue_id(TRACKED_NOTE) == "12"
    assert get_repo_override(TRACKED_NOTE) == "acme/widgets"
    assert get_issue_title(TRACKED_NOTE) == "Crash on start"


def test_readers_without_front_matter():
    for text in ("", "Body", "---\ngithub_issue: 3\nno closing"):
        assert get_issue_id(text) is None
        assert get_repo_override(text) is None
        assert get_issue_title(text) is None


def test_title_with_colon_is_not_truncated():
    text = "---\ngithub_issue_title: Fix: crash: again\n---\n"
    assert get_issue_title(text) == "Fix: crash: again"


@pytest.mark.parametrize(
    "setter, getter, value",
    [
        (set_issue_id, get_issue_id, "981"),
        (set_repo_override, get_repo_override, "acme/widgets"),
        (set_repo_override, get_repo_override, "widgets"),
        (set_issue_title, get_issue_title, "Plain title"),
        (set_issue_title, get_issue_title, 'He said "hi": ok'),
        (set_issue_title, get_issue_title, "back\\slash and #hash"),
        (set_issue_title, get_issue_title, "two\nlines"),
        (set_issue_title, get_issue_title, "  padded  "),
    ],
)
def test_set_then_get_round_trip(setter, getter, value):
    for text in (TRACKED_NOTE, "---\n---\n", "no block"):
        assert getter(setter(text, value)) == value


def test_title_is_written_in_quoted_escaped_form():
    block = set_issue_title("", 'He said "hi": ok')
    assert 'github_issue_title: "He said \\"hi\\": ok"' in block.split("\n")
    assert get_issue_title(block) == 'He said "hi": ok'


def test_escape_leaves_plain_titles_alone():
    assert escape_title("Add login page") == "Add login page"
    assert escape_title("50% done") == '"50% done"'
    assert unescape_title("no quotes") == "no quotes"


def test_single_field_setter_keeps_other_tracked_fields():
    block = set_issue_id(TRACKED_NOTE, "13")
    assert get_issue_id(block) == "13"
    assert get_repo_override(block) == "acme/widgets"
    assert get_issue_title(block) == "Crash on start"


def test_write_all_preserves_untracked_keys_in_order():
    block = write_all_tracked_properties(TRACKED_NOTE, issue_id="99")
    assert read_block(block).lines == [
        "tags: notes",
        "foo: bar",
        "github_issue: 99",
        "github_repo: acme/widgets",
        "github_issue_title: Crash on start",
    ]


def test_write_all_distinguishes_cleared_from_not_supplied():
    kept = write_all_tracked_properties(TRACKED_NOTE)
    assert get_repo_override(kept) == "acme/widgets"
    cleared = write_all_tracked_properties(TRACKED_NOTE, repo_override="")
    assert get_repo_override(cleared) is None
    assert "github_repo" not in cleared
    assert get_issue_id(cleared) == "12"


def test_write_all_does_not_double_quote_carried_title():
    quoted = set_issue_title("", 'A "quoted" title')
    again = write_all_tracked_properties(quoted, issue_id="5")
    assert get_issue_title(again) == 'A "quoted" title'


def test_write_all_is_idempotent():
    args = {"issue_id": "7", "repo_override": "acme/other", "issue_title": "Hi: there"}
    first = write_all_tracked_properties(TRACKED_NOTE, **args)
    assert write_all_tracked_properties(TRACKED_NOTE, **args) == first
    rewritten = apply_tracked_properties(TRACKED_NOTE, **args)
    assert write_all_tracked_properties(rewritten, **args) == first


def test_write_all_rejects_non_numeric_issue_id():
    with pytest.raises(ValueError, match="decimal"):
        write_all_tracked_properties("", issue_id="abc")


def test_issue_only_block_on_plain_note():
    assert apply_tracked_properties("Body", issue_id="42") == "---\ngithub_issue: 42\n---\nBody"


def test_tracked_key_order_is_fixed():
    text = "---\ngithub_issue_title: T\ngithub_repo: r\ngithub_issue: 1\n---\n"
    block = write_all_tracked_properties(text)
    assert block == "---\ngithub_issue: 1\ngithub_repo: r\ngithub_issue_title: T\n---"


@pytest.mark.parametrize("raw", ["abc", "12a", "-3", "²"])
def test_non_decimal_issue_id_reads_as_absent(raw):
    text = f"---\ngithub_issue: {raw}\ngithub_repo: acme/widgets\n---\nBody"
    assert get_issue_id(text) is None


def test_non_decimal_issue_id_is_not_carried_forward():
    text = "---\ntags: x\ngithub_issue: abc\ngithub_repo: acme/widgets\n---\nBody"
    block = write_all_tracked_properties(text, repo_override="acme/other")
    assert block == "---\ntags: x\ngithub_repo: acme/other\n---"


def test_non_ascii_digits_are_rejected():
    with pytest.raises(ValueError, match="decimal"):
        write_all_tracked_properties("", issue_id="²")
