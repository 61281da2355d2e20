from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import requests

from .config import DEFAULT_API_URL
from .models import TransportResponse
from .repo_config import EffectiveRepoConfig

USER_AGENT = "issuenote-rest/0.1.0"
HTTP_ERROR_STATUS = 400
REQUEST_TIMEOUT = 30


class GitHubAPIError(RuntimeError):
    """Raised when the GitHub REST API returns an error."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        response_text: str | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.response_text = response_text


@dataclass
class GitHubRestClient:
    """Issue transport over the GitHub REST API.

    The client is not bound to a repository or token: every call receives the
    effective config of the note being synced, since notes may target
    different repositories.
    """

    base_url: str = DEFAULT_API_URL
    session: requests.Session | None = None
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:  # pragma: no cover - simple wiring
        self._session = self.session or requests.Session()
        self._session.headers.setdefault("Accept", "application/vnd.github+json")
        self._session.headers.setdefault("User-Agent", USER_AGENT)

    # ---- REST helpers -------------------------------------------------
    def _request(
        self,
        method: str,
        config: EffectiveRepoConfig,
        path: str,
        *,
        json_body: Any | None = None,
    ) -> TransportResponse:
        url = f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
        headers = dict(self._session.headers)
        if config.token:
            headers["Authorization"] = f"Bearer {config.token}"
        response = self._session.request(
            method,
            url,
            json=json_body,
            headers=headers,
            timeout=REQUEST_TIMEOUT,
        )
        if response.status_code >= HTTP_ERROR_STATUS:
            raise GitHubAPIError(
                f"GitHub API {method} {url} failed with {response.status_code}",
                status=response.status_code,
                response_text=response.text,
            )
        payload: dict[str, Any] = {}
        if response.text:
            try:
                decoded = response.json()
            except ValueError as exc:
                raise GitHubAPIError(
                    f"GitHub API {method} {url} returned invalid JSON",
                    status=response.status_code,
                    response_text=response.text,
                ) from exc
            if isinstance(decoded, dict):
                payload = decoded
        return TransportResponse(status=response.status_code, json=payload)

    @staticmethod
    def _issues_path(config: EffectiveRepoConfig, number: int | str | None = None) -> str:
        path = f"/repos/{config.owner}/{config.repo}/issues"
        return path if number is None else f"{path}/{number}"

    # ---- Issue operations --------------------------------------------
    def get_issue(self, config: EffectiveRepoConfig, number: int | str) -> TransportResponse:
        return self._request("GET", config, self._issues_path(config, number))

    def create_issue(
        self, config: EffectiveRepoConfig, *, title: str, body: str
    ) -> TransportResponse:
        payload = {"title": title, "body": body}
        return self._request("POST", config, self._issues_path(config), json_body=payload)

    def update_issue(
        self, config: EffectiveRepoConfig, number: int | str, *, title: str, body: str
    ) -> TransportResponse:
        payload = {"title": title, "body": body}
        return self._request(
            "PATCH", config, self._issues_path(config, number), json_body=payload
        )


__all__ = ["GitHubAPIError", "GitHubRestClient", "USER_AGENT"]
