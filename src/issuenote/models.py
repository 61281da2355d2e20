from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def parse_timestamp(value: str) -> int:
    """Convert an ISO-8601 timestamp to epoch milliseconds.

    GitHub reports ``2024-01-02T00:00:00Z``; naive values are taken as UTC.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


@dataclass(frozen=True)
class TransportResponse:
    """Raw answer of the issue tracker: HTTP status plus decoded JSON body."""

    status: int
    json: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class IssueRecord:
    """The slice of a GitHub issue the sync engine cares about."""

    number: int
    title: str
    body: str
    updated_at: str

    @property
    def updated_at_ms(self) -> int:
        return parse_timestamp(self.updated_at)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> IssueRecord:
        number = data.get("number")
        updated_at = data.get("updated_at")
        if not isinstance(number, int) or not isinstance(updated_at, str):
            raise ValueError("issue payload lacks 'number' or 'updated_at'")
        parse_timestamp(updated_at)
        return cls(
            number=number,
            title=str(data.get("title") or ""),
            # GitHub returns null for an empty body
            body=str(data.get("body") or ""),
            updated_at=updated_at,
        )


__all__ = ["IssueRecord", "TransportResponse", "parse_timestamp"]
