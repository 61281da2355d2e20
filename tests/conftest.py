"""Pytest configuration for issuenote tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install (`pip install -e .`).
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from issuenote.models import TransportResponse  # noqa: E402
from issuenote.repo_config import EffectiveRepoConfig  # noqa: E402
from issuenote.storage import LocalVault  # noqa: E402


@dataclass
class Settings:
    owner: str | None = "acme"
    repo: str | None = "widgets"
    token: str | None = "tkn"


class FakeTransport:
    """In-memory issue tracker recording every call it receives."""

    def __init__(self) -> None:
        self.issues: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, EffectiveRepoConfig, dict[str, Any]]] = []
        self.next_number = 100
        self.updated_at = "2024-01-02T00:00:00Z"
        self.fail_with: Exception | None = None
        self.status_override: int | None = None

    def add_issue(
        self, number: int, title: str, body: str, updated_at: str = "2024-01-02T00:00:00Z"
    ) -> None:
        self.issues[str(number)] = {
            "number": number,
            "title": title,
            "body": body,
            "updated_at": updated_at,
        }

    def _maybe_fail(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def get_issue(self, config: EffectiveRepoConfig, number: int | str) -> TransportResponse:
        self.calls.append(("get", config, {"number": str(number)}))
        self._maybe_fail()
        issue = self.issues[str(number)]
        return TransportResponse(status=self.status_override or 200, json=dict(issue))

    def create_issue(
        self, config: EffectiveRepoConfig, *, title: str, body: str
    ) -> TransportResponse:
        self.calls.append(("create", config, {"title": title, "body": body}))
        self._maybe_fail()
        self.next_number += 1
        self.add_issue(self.next_number, title, body, self.updated_at)
        return TransportResponse(
            status=self.status_override or 201,
            json={"number": self.next_number, "updated_at": self.updated_at},
        )

    def update_issue(
        self, config: EffectiveRepoConfig, number: int | str, *, title: str, body: str
    ) -> TransportResponse:
        self.calls.append(("update", config, {"number": str(number), "title": title, "body": body}))
        self._maybe_fail()
        self.add_issue(int(number), title, body, self.updated_at)
        return TransportResponse(
            status=self.status_override or 200,
            json={"number": int(number), "updated_at": self.updated_at},
        )


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def vault(tmp_path: Path) -> LocalVault:
    root = tmp_path / "vault"
    root.mkdir()
    return LocalVault(root)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("GITHUB_TOKEN", "GH_TOKEN", "GITHUB_PAT", "GITHUB_ACCESS_TOKEN", "ISSUENOTE_QUIET"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("NO_COLOR", "1")
    # handlers bind sys.stderr at creation; start every test with a fresh logger
    monkeypatch.setattr("issuenote.logging._GLOBAL", None)
