from __future__ import annotations

import pytest

from issuenote.storage import FileHandle, LocalVault, join_path


def test_file_handle_parts():
    handle = FileHandle("projects/web/Fix login.md")
    assert handle.name == "Fix login.md"
    assert handle.basename == "Fix login"
    assert handle.parent == "projects/web"
    assert FileHandle("Top.md").parent == ""


def test_join_path():
    assert join_path("", "a.md") == "a.md"
    assert join_path("dir/", "a.md") == "dir/a.md"


def test_create_read_and_list(vault: LocalVault):
    handle = vault.create("sub/Note.md", "hello")
    vault.create("Other.md", "x")
    (vault.root / "ignored.txt").write_text("not a note")

    assert handle == FileHandle("sub/Note.md")
    assert vault.read(handle) == "hello"
    assert [stat.path for stat in vault.list()] == ["Other.md", "sub/Note.md"]


def test_create_refuses_existing_file(vault: LocalVault):
    vault.create("Note.md", "one")
    with pytest.raises(FileExistsError):
        vault.create("Note.md", "two")
    assert vault.read(FileHandle("Note.md")) == "one"


def test_modify_sets_content_and_mtime(vault: LocalVault):
    handle = vault.create("Note.md", "old")
    vault.modify(handle, "new", mtime=1_704_153_600_123)

    assert vault.read(handle) == "new"
    (stat,) = vault.list()
    assert stat.mtime == 1_704_153_600_123


def test_modify_missing_file(vault: LocalVault):
    with pytest.raises(FileNotFoundError):
        vault.modify(FileHandle("missing.md"), "text")


def test_rename(vault: LocalVault):
    handle = vault.create("Old.md", "body")
    vault.rename(handle, "moved/New.md")
    assert vault.read(FileHandle("moved/New.md")) == "body"
    assert not (vault.root / "Old.md").exists()


def test_rename_refuses_to_overwrite(vault: LocalVault):
    handle = vault.create("Old.md", "body")
    vault.create("New.md", "other")
    with pytest.raises(FileExistsError):
        vault.rename(handle, "New.md")


def test_paths_cannot_escape_the_vault(vault: LocalVault, tmp_path):
    with pytest.raises(ValueError):
        vault.create("../outside.md", "x")
    with pytest.raises(ValueError):
        vault.handle_for(tmp_path / "elsewhere.md")


def test_handle_for_absolute_and_relative(vault: LocalVault):
    vault.create("dir/Note.md", "x")
    assert vault.handle_for(vault.root / "dir" / "Note.md") == FileHandle("dir/Note.md")
    assert vault.handle_for("dir/Note.md") == FileHandle("dir/Note.md")


def test_delete(vault: LocalVault):
    handle = vault.create("Gone.md", "x")
    vault.delete(handle)
    assert vault.list() == []
    with pytest.raises(FileNotFoundError):
        vault.delete(handle)
