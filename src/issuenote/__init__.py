"""issuenote - keep Markdown notes in sync with GitHub issues.

High-level public API:

import asyncio

from issuenote import SyncEngine, Document, load_config
from issuenote.github_rest import GitHubRestClient
from issuenote.storage import LocalVault

cfg = load_config('issuenote.config.yaml')
vault = LocalVault(cfg.vault_root)
engine = SyncEngine(GitHubRestClient(base_url=cfg.api_url), vault)
handle = vault.handle_for('Fix login crash.md')
doc = Document(handle, vault.read(handle))
result = asyncio.run(engine.fetch('42', handle, cfg))
print(result.verdict)

Front-matter helpers (``issuenote.properties``) are pure functions and can be
used without any network or storage access.
"""

from __future__ import annotations

from .config import NoteConfig, load_config
from .properties import (
    get_issue_id,
    get_issue_title,
    get_repo_override,
    write_all_tracked_properties,
)
from .repo_config import parse_override, resolve
from .sync import Document, IssueStatus, SyncEngine, SyncVerdict

__version__ = "0.1.0"

__all__ = [
    "Document",
    "IssueStatus",
    "NoteConfig",
    "SyncEngine",
    "SyncVerdict",
    "get_issue_id",
    "get_issue_title",
    "get_repo_override",
    "load_config",
    "parse_override",
    "resolve",
    "write_all_tracked_properties",
    "__version__",
]
