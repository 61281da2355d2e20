"""Effective repository resolution.

A note can point at a different repository than the configured default via
its ``github_repo`` property (``owner/repo`` or bare ``repo``). The token
always comes from the global settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from .properties import get_repo_override


class RepoSettings(Protocol):
    owner: str | None
    repo: str | None
    token: str | None


@dataclass(frozen=True)
class RepoOverride:
    owner: str | None = None
    repo: str | None = None


@dataclass(frozen=True)
class EffectiveRepoConfig:
    owner: str
    repo: str
    token: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_override(raw: str | None) -> RepoOverride:
    """Split an override string into owner and repo.

    Only the first ``/`` separates the two. Empty segments such as the owner in
    ``"/widgets"`` are treated as absent so the global default applies.
    """
    if raw is None or not raw.strip():
        return RepoOverride()
    if "/" in raw:
        owner, _, repo = raw.partition("/")
        return RepoOverride(owner=owner.strip() or None, repo=repo.strip() or None)
    return RepoOverride(repo=raw.strip())


def resolve(text: str, settings: RepoSettings) -> EffectiveRepoConfig:
    override = parse_override(get_repo_override(text))
    return EffectiveRepoConfig(
        owner=override.owner or settings.owner or "",
        repo=override.repo or settings.repo or "",
        token=settings.token or "",
    )


__all__ = ["EffectiveRepoConfig", "RepoOverride", "RepoSettings", "parse_override", "resolve"]
