"""Two-way sync between a note and its GitHub issue.

Each operation is a coroutine that performs its collaborator calls one at a
time (storage and transport calls run in the default executor); everything in
between is plain synchronous text processing. The engine keeps no state of
its own: the issue id, verdict and timestamps travel in :class:`IssueStatus`
values that the caller holds on to.

Callers must not start a second operation on the same note while one is in
flight; nothing here guards against re-entrancy.
"""

from __future__ import annotations

import asyncio
import functools
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, TypeVar

import requests

from .errors import (
    MissingFileHandle,
    RenameFailure,
    StorageFailure,
    TransportFailure,
)
from .frontmatter import strip_block
from .github_rest import GitHubAPIError
from .logging import StructuredLogger, get_logger
from .models import IssueRecord, TransportResponse, parse_timestamp
from .properties import (
    apply_tracked_properties,
    get_issue_id,
    get_repo_override,
    write_all_tracked_properties,
)
from .repo_config import EffectiveRepoConfig, RepoSettings, resolve
from .storage import NOTE_SUFFIX, FileHandle, VaultStorage, join_path

T = TypeVar("T")

HTTP_OK = 200
HTTP_CREATED = 201

UNTITLED_NOTE = "Untitled issue"

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|]')
_WHITESPACE_RUN = re.compile(r"\s+")


class SyncVerdict(str, Enum):
    UNKNOWN = "unknown"
    UP_TO_DATE = "up-to-date"
    PULL_AVAILABLE = "pull-available"
    PUSH_AVAILABLE = "push-available"


class SyncState(str, Enum):
    UNTRACKED = "untracked"
    TRACKED = "tracked"
    FETCHED = "fetched"


@dataclass(frozen=True)
class IssueStatus:
    """What a UI needs to render the sync controls for one note."""

    issue_id: str | None = None
    verdict: SyncVerdict = SyncVerdict.UNKNOWN
    remote_updated_at: str | None = None

    @property
    def state(self) -> SyncState:
        if not self.issue_id:
            return SyncState.UNTRACKED
        if self.verdict is SyncVerdict.UNKNOWN:
            return SyncState.TRACKED
        return SyncState.FETCHED

    @classmethod
    def for_text(cls, text: str) -> IssueStatus:
        return cls(issue_id=get_issue_id(text))


@dataclass(frozen=True)
class Document:
    """Snapshot of a note: where it lives and what it contained when read."""

    handle: FileHandle | None
    text: str

    @property
    def display_name(self) -> str:
        return self.handle.basename if self.handle else ""


@dataclass(frozen=True)
class FetchResult:
    remote_updated_at: str
    verdict: SyncVerdict


@dataclass(frozen=True)
class PullResult:
    handle: FileHandle
    status: IssueStatus
    warnings: list[str] = field(default_factory=list)


class IssueTransport(Protocol):
    def get_issue(self, config: EffectiveRepoConfig, number: int | str) -> TransportResponse: ...

    def create_issue(
        self, config: EffectiveRepoConfig, *, title: str, body: str
    ) -> TransportResponse: ...

    def update_issue(
        self, config: EffectiveRepoConfig, number: int | str, *, title: str, body: str
    ) -> TransportResponse: ...


def sanitize_filename(title: str) -> str:
    """Make an issue title usable as a file name (may return an empty string)."""
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", title)
    return _WHITESPACE_RUN.sub(" ", cleaned).strip()


def compute_verdict(remote_updated_at: str, local_mtime: int | None) -> SyncVerdict:
    """Compare the remote update time with the local mtime (epoch ms)."""
    if local_mtime is None:
        return SyncVerdict.UNKNOWN
    remote = parse_timestamp(remote_updated_at)
    if remote > local_mtime:
        return SyncVerdict.PULL_AVAILABLE
    if remote < local_mtime:
        return SyncVerdict.PUSH_AVAILABLE
    return SyncVerdict.UP_TO_DATE


class SyncEngine:
    def __init__(
        self,
        transport: IssueTransport,
        storage: VaultStorage,
        logger: StructuredLogger | None = None,
    ):
        self.transport = transport
        self.storage = storage
        self.logger = logger or get_logger()

    # --- collaborator calls -------------------------------------------------
    async def _call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(fn, *args, **kwargs))

    async def _transport(
        self,
        action: str,
        expected: int,
        fn: Callable[..., TransportResponse],
        *args: Any,
        **kwargs: Any,
    ) -> TransportResponse:
        try:
            response = await self._call(fn, *args, **kwargs)
        except GitHubAPIError as exc:
            raise TransportFailure(f"Could not {action}: {exc}", status=exc.status) from exc
        except requests.RequestException as exc:
            raise TransportFailure(f"Could not {action}: {exc}") from exc
        self.logger.log_operation("github_request", request=action, status=response.status)
        if response.status != expected:
            raise TransportFailure(
                f"Could not {action}: unexpected status {response.status}",
                status=response.status,
            )
        return response

    async def _storage(self, action: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        try:
            return await self._call(fn, *args, **kwargs)
        except (OSError, ValueError) as exc:
            raise StorageFailure(f"Could not {action}: {exc}") from exc

    async def _get_issue(self, config: EffectiveRepoConfig, issue_id: str) -> IssueRecord:
        self.logger.debug(
            f"Fetching issue from: {config.full_name}", repo=config.full_name, issue_number=issue_id
        )
        response = await self._transport(
            f"fetch issue #{issue_id} from {config.full_name}",
            HTTP_OK,
            self.transport.get_issue,
            config,
            issue_id,
        )
        return self._record(response, f"issue #{issue_id}")

    @staticmethod
    def _record(response: TransportResponse, what: str) -> IssueRecord:
        try:
            return IssueRecord.from_json(response.json)
        except ValueError as exc:
            raise TransportFailure(f"Malformed response for {what}: {exc}") from exc

    async def _local_mtime(self, handle: FileHandle) -> int | None:
        stats = await self._storage("list notes", self.storage.list)
        for stat in stats:
            if stat.path == handle.path:
                return stat.mtime
        return None

    @staticmethod
    def _require_handle(document: Document, action: str) -> FileHandle:
        if document.handle is None:
            raise MissingFileHandle(f"Cannot {action}: no file is open")
        return document.handle

    # --- operations ---------------------------------------------------------
    async def push(
        self, issue_id: str | None, document: Document, settings: RepoSettings
    ) -> IssueStatus:
        """Create or update the remote issue from the note's name and body."""
        handle = self._require_handle(document, "push")
        config = resolve(document.text, settings)
        title = document.display_name
        body = strip_block(document.text)

        if issue_id:
            response = await self._transport(
                f"update issue #{issue_id} in {config.full_name}",
                HTTP_OK,
                self.transport.update_issue,
                config,
                issue_id,
                title=title,
                body=body,
            )
            new_id = issue_id
        else:
            response = await self._transport(
                f"create issue in {config.full_name}",
                HTTP_CREATED,
                self.transport.create_issue,
                config,
                title=title,
                body=body,
            )
            number = response.json.get("number")
            if not isinstance(number, int):
                raise TransportFailure("Created issue response lacks an issue number")
            new_id = str(number)

        updated_at = response.json.get("updated_at")
        try:
            remote_mtime = parse_timestamp(str(updated_at))
        except ValueError as exc:
            raise TransportFailure(f"Issue #{new_id} response has no valid 'updated_at'") from exc
        # local mtime must equal the remote update time, otherwise the next
        # fetch reports the note as locally newer
        text = apply_tracked_properties(document.text, issue_id=new_id)
        await self._storage(
            f"update {handle.path}",
            self.storage.modify,
            handle,
            text,
            mtime=remote_mtime,
        )
        self.logger.log_issue_action(
            "updated" if issue_id else "created", handle.path, new_id, repo=config.full_name
        )
        return IssueStatus(issue_id=new_id, remote_updated_at=str(updated_at))

    async def fetch(
        self, issue_id: str, handle: FileHandle | None, settings: RepoSettings
    ) -> FetchResult:
        """Compare the remote issue with the stored note; never writes."""
        if handle is None:
            raise MissingFileHandle("Cannot fetch: no file is open")
        # the stored content, not the caller's snapshot, decides the repository
        current = await self._storage(f"read {handle.path}", self.storage.read, handle)
        config = resolve(current, settings)
        record = await self._get_issue(config, issue_id)
        local_mtime = await self._local_mtime(handle)
        verdict = compute_verdict(record.updated_at, local_mtime)
        self.logger.log_issue_action(
            "fetched", handle.path, issue_id, verdict=verdict.value, repo=config.full_name
        )
        return FetchResult(remote_updated_at=record.updated_at, verdict=verdict)

    async def pull(
        self,
        issue_id: str,
        document: Document,
        settings: RepoSettings,
        *,
        rename: bool = True,
    ) -> PullResult:
        """Replace the note body with the remote issue and relink it."""
        handle = self._require_handle(document, "pull")
        # read before any remote data arrives: the override is local-only state
        repo_override = get_repo_override(document.text)
        config = resolve(document.text, settings)
        record = await self._get_issue(config, issue_id)

        # local untracked keys stay; the body comes from the remote issue
        block = write_all_tracked_properties(
            document.text,
            issue_id=str(record.number),
            repo_override=repo_override or "",
            issue_title=record.title,
        )
        text = f"{block}\n{strip_block(record.body)}"
        await self._storage(
            f"update {handle.path}",
            self.storage.modify,
            handle,
            text,
            mtime=record.updated_at_ms,
        )
        # content is written on the original path; a failed rename only warns
        warnings: list[str] = []
        if rename:
            handle = await self._rename_to_title(handle, record.title, warnings)
        self.logger.log_issue_action("pulled", handle.path, record.number, repo=config.full_name)
        return PullResult(
            handle=handle,
            status=IssueStatus(issue_id=str(record.number), remote_updated_at=record.updated_at),
            warnings=warnings,
        )

    async def track_issue(
        self, issue_id: str, document: Document, settings: RepoSettings
    ) -> PullResult:
        """Link the note to another issue by pulling that issue into it."""
        return await self.pull(issue_id, document, settings)

    async def create_from_issue(
        self,
        issue_id: str,
        settings: RepoSettings,
        parent: str = "",
        *,
        source: Document | None = None,
    ) -> FileHandle:
        """Create a new note for ``issue_id`` next to ``parent``.

        The repository override of ``source`` (the note the user is looking at)
        is carried over so the new note targets the same repository.
        """
        source_text = source.text if source is not None else ""
        config = resolve(source_text, settings)
        record = await self._get_issue(config, issue_id)

        name = sanitize_filename(record.title) or UNTITLED_NOTE
        path = join_path(parent, f"{name}{NOTE_SUFFIX}")
        block = write_all_tracked_properties(
            "",
            issue_id=str(record.number),
            repo_override=get_repo_override(source_text) or "",
            issue_title=record.title,
        )
        text = f"{block}\n{strip_block(record.body)}"
        handle = await self._storage(f"create {path}", self.storage.create, path, text)
        try:
            await self._storage(
                f"update {handle.path}",
                self.storage.modify,
                handle,
                text,
                mtime=record.updated_at_ms,
            )
        except StorageFailure:
            # a note left with a wall-clock mtime would read as locally newer
            await self._discard(handle)
            raise
        self.logger.log_issue_action("imported", handle.path, record.number, repo=config.full_name)
        return handle

    async def _discard(self, handle: FileHandle) -> None:
        try:
            await self._call(self.storage.delete, handle)
        except (OSError, ValueError) as exc:
            self.logger.warning(f"Could not remove {handle.path}: {exc}", note=handle.path)

    async def _rename_to_title(
        self, handle: FileHandle, title: str, warnings: list[str]
    ) -> FileHandle:
        name = sanitize_filename(title)
        if not name:
            return handle
        new_path = join_path(handle.parent, f"{name}{NOTE_SUFFIX}")
        if new_path == handle.path:
            return handle
        try:
            await self._call(self.storage.rename, handle, new_path)
        except (OSError, ValueError) as exc:
            failure = RenameFailure(f"Could not rename {handle.path} to {new_path}: {exc}")
            self.logger.warning(str(failure), note=handle.path)
            warnings.append(str(failure))
            return handle
        return FileHandle(new_path)


__all__ = [
    "Document",
    "FetchResult",
    "IssueStatus",
    "IssueTransport",
    "PullResult",
    "SyncEngine",
    "SyncState",
    "SyncVerdict",
    "UNTITLED_NOTE",
    "compute_verdict",
    "sanitize_filename",
]
