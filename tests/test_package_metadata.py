from __future__ import annotations

from importlib import import_module


def test_issuenote_dunder_all_exports() -> None:
    module = import_module("issuenote")
    exported = set(module.__all__)
    expected = {
        "load_config",
        "NoteConfig",
        "SyncEngine",
        "Document",
        "write_all_tracked_properties",
        "__version__",
    }
    assert expected <= exported
    for name in exported:
        assert hasattr(module, name)
