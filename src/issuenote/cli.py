"""issuenote CLI.

Subcommands:
  status  -> show the tracked properties and the repository a note targets
  fetch   -> compare a note with its issue (no mutation)
  push    -> create or update the issue from the note
  pull    -> overwrite the note with the issue
  track   -> link a note to an existing issue and pull it
  new     -> create a new note from an issue
  repo    -> show, set or clear a note's repository override

Each invocation is one operation; the CLI keeps no state between runs.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from issuenote.config import CONFIG_DEFAULT, ConfigError, NoteConfig, load_config
from issuenote.env_auth import EnvAuthConfig, create_env_auth_manager
from issuenote.errors import IssueNoteError, MissingFileHandle, StorageFailure, redact
from issuenote.github_rest import GitHubRestClient
from issuenote.logging import configure_logging, get_logger
from issuenote.properties import (
    apply_tracked_properties,
    get_issue_id,
    get_issue_title,
    get_repo_override,
)
from issuenote.repo_config import resolve
from issuenote.storage import LocalVault
from issuenote.sync import Document, IssueStatus, SyncEngine
from issuenote.ux import (
    print_error,
    print_fields,
    print_header,
    print_info,
    print_success,
    print_warning,
    verdict_message,
)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

_MAX_HELP_WIDTH = 100


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


class _FormatterArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(*args, **kwargs)


def _build_parser() -> argparse.ArgumentParser:
    p = _FormatterArgumentParser(
        prog="issuenote", description="Keep Markdown notes in sync with GitHub issues"
    )
    p.add_argument("--config", default=CONFIG_DEFAULT, help="Path to issuenote.config.yaml")
    p.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors (env: ISSUENOTE_QUIET=1)",
    )
    sub = p.add_subparsers(
        dest="cmd",
        required=True,
        parser_class=_FormatterArgumentParser,
        metavar="<command>",
    )

    ps = sub.add_parser("status", help="Show tracked properties of a note")
    ps.add_argument("note")

    pf = sub.add_parser("fetch", help="Check whether the note or the issue is ahead")
    pf.add_argument("note")
    pf.add_argument("--issue", help="Issue number (default: github_issue property)")

    pp = sub.add_parser("push", help="Create or update the issue from the note")
    pp.add_argument("note")
    pp.add_argument("--issue", help="Issue number (default: github_issue property)")

    pl = sub.add_parser("pull", help="Replace the note with the issue content")
    pl.add_argument("note")
    pl.add_argument("--issue", help="Issue number (default: github_issue property)")
    pl.add_argument(
        "--no-rename",
        dest="rename",
        action="store_false",
        help="Keep the file name instead of renaming it after the issue title",
    )

    pt = sub.add_parser("track", help="Link a note to an issue and pull it")
    pt.add_argument("note")
    pt.add_argument("issue")

    pn = sub.add_parser("new", help="Create a new note from an issue")
    pn.add_argument("issue")
    pn.add_argument(
        "--from",
        dest="source",
        help="Note whose repository override (and folder) the new note inherits",
    )
    pn.add_argument("--dir", help="Vault folder for the new note")

    pr = sub.add_parser("repo", help="Show, set or clear the repository override")
    pr.add_argument("note")
    pr.add_argument("value", nargs="?", help='Format: "owner/repo" or just "repo"')
    pr.add_argument("--clear", action="store_true")
    return p


class _Context:
    def __init__(self, cfg: NoteConfig):
        self.cfg = cfg
        self.vault = LocalVault(cfg.vault_root)
        self.engine = SyncEngine(GitHubRestClient(base_url=cfg.api_url), self.vault)

    def open(self, note: str) -> Document:
        try:
            handle = self.vault.handle_for(Path(note).resolve())
            return Document(handle=handle, text=self.vault.read(handle))
        except (OSError, ValueError) as exc:
            raise StorageFailure(f"Cannot open note {note}: {exc}") from exc

    def require_settings(self) -> None:
        missing = self.cfg.missing_settings()
        if not missing:
            return
        message = "Missing settings: " + ", ".join(f"github.{name}" for name in missing)
        if "token" in missing:
            auth = create_env_auth_manager(EnvAuthConfig(load_dotenv=False))
            message += "".join(f"\n  - {hint}" for hint in auth.get_authentication_recommendations())
        raise ConfigError(message)


def _issue_for(args: argparse.Namespace, document: Document, action: str) -> str:
    issue = getattr(args, "issue", None) or get_issue_id(document.text)
    if not issue:
        raise IssueNoteError(f"Cannot {action}: no issue ID in properties or --issue")
    return str(issue)


def _cmd_status(ctx: _Context, args: argparse.Namespace) -> int:
    document = ctx.open(args.note)
    effective = resolve(document.text, ctx.cfg)
    override = get_repo_override(document.text)
    status = IssueStatus.for_text(document.text)
    print_header(f"Issue Editor: {document.display_name}")
    print_fields(
        [
            ("Working with", effective.full_name),
            ("Issue", f"#{status.issue_id}" if status.issue_id else "(first push)"),
            ("Issue title", get_issue_title(document.text) or "-"),
            ("Repo override", override or f"(default {ctx.cfg.owner}/{ctx.cfg.repo})"),
            ("State", status.state.value),
        ]
    )
    return EXIT_OK


def _cmd_fetch(ctx: _Context, args: argparse.Namespace) -> int:
    ctx.require_settings()
    document = ctx.open(args.note)
    issue = _issue_for(args, document, "fetch")
    print_info(f"Fetching from {resolve(document.text, ctx.cfg).full_name}...")
    result = asyncio.run(ctx.engine.fetch(issue, document.handle, ctx.cfg))
    status = IssueStatus(
        issue_id=issue, verdict=result.verdict, remote_updated_at=result.remote_updated_at
    )
    print_fields([("Remote updated", result.remote_updated_at)])
    print_success(verdict_message(status))
    return EXIT_OK


def _cmd_push(ctx: _Context, args: argparse.Namespace) -> int:
    ctx.require_settings()
    document = ctx.open(args.note)
    issue = args.issue or get_issue_id(document.text)
    status = asyncio.run(ctx.engine.push(issue, document, ctx.cfg))
    where = resolve(document.text, ctx.cfg).full_name
    verb = "updated" if issue else "created"
    print_success(f"Issue #{status.issue_id} {verb} in {where}")
    return EXIT_OK


def _cmd_pull(ctx: _Context, args: argparse.Namespace) -> int:
    ctx.require_settings()
    document = ctx.open(args.note)
    issue = _issue_for(args, document, "pull")
    print_info(f"Pulling from {resolve(document.text, ctx.cfg).full_name}...")
    result = asyncio.run(ctx.engine.pull(issue, document, ctx.cfg, rename=args.rename))
    for warning in result.warnings:
        print_warning(warning)
    print_success(f"Successfully pulled issue #{result.status.issue_id} into {result.handle.path}")
    return EXIT_OK


def _cmd_track(ctx: _Context, args: argparse.Namespace) -> int:
    ctx.require_settings()
    document = ctx.open(args.note)
    result = asyncio.run(ctx.engine.track_issue(args.issue, document, ctx.cfg))
    for warning in result.warnings:
        print_warning(warning)
    print_success(f"Issue changed in {resolve(document.text, ctx.cfg).full_name}!")
    return EXIT_OK


def _cmd_new(ctx: _Context, args: argparse.Namespace) -> int:
    ctx.require_settings()
    source = ctx.open(args.source) if args.source else None
    parent = args.dir
    if parent is None:
        parent = source.handle.parent if source and source.handle else ""
    handle = asyncio.run(ctx.engine.create_from_issue(args.issue, ctx.cfg, parent, source=source))
    print_success(f"Created {handle.path}")
    return EXIT_OK


def _cmd_repo(ctx: _Context, args: argparse.Namespace) -> int:
    document = ctx.open(args.note)
    if args.value is None and not args.clear:
        override = get_repo_override(document.text)
        print(override or f"(default {ctx.cfg.owner}/{ctx.cfg.repo})")
        return EXIT_OK
    handle = document.handle
    if handle is None:
        raise MissingFileHandle("No file is currently open")
    value = "" if args.clear else args.value
    text = apply_tracked_properties(document.text, repo_override=value)
    try:
        ctx.vault.modify(handle, text)
    except OSError as exc:
        raise StorageFailure(f"Cannot update {handle.path}: {exc}") from exc
    if value:
        print_success(
            f"Repository override set to: {value} (using {resolve(text, ctx.cfg).full_name})"
        )
    else:
        print_success("Repository override cleared")
    return EXIT_OK


_HANDLERS = {
    "status": _cmd_status,
    "fetch": _cmd_fetch,
    "push": _cmd_push,
    "pull": _cmd_pull,
    "track": _cmd_track,
    "new": _cmd_new,
    "repo": _cmd_repo,
}


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.quiet and os.environ.get("ISSUENOTE_QUIET") == "1":
        args.quiet = True
    try:
        cfg = load_config(args.config)
    except ConfigError as exc:
        print_error(str(exc))
        return EXIT_USAGE
    configure_logging(
        json_logging=cfg.logging_json_enabled,
        level="WARNING" if args.quiet else cfg.logging_level,
    )
    handler = _HANDLERS[args.cmd]
    try:
        with get_logger().timed_operation(f"cli_{args.cmd}", command=args.cmd):
            exit_code = handler(_Context(cfg), args)
    except ConfigError as exc:
        print_error(str(exc))
        return EXIT_USAGE
    except IssueNoteError as exc:
        print_error(f"{args.cmd.capitalize()} failed: {redact(str(exc))}")
        return EXIT_FAILURE
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
