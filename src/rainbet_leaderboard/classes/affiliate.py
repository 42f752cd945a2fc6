"""Participant rows as reported by the affiliate API, and their ranked form."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class ParticipantRecord:
    """One affiliate row for a period: who, and how much they wagered (as text)."""

    username: str | None = None
    id: str | None = None
    wagered_amount: str | None = None

    @classmethod
    def from_api(cls, row: Mapping[str, Any]) -> "ParticipantRecord":
        return cls(
            username=_optional_text(row.get("username")),
            id=_optional_text(row.get("id")),
            wagered_amount=_optional_text(row.get("wagered_amount")),
        )

    @property
    def identity(self) -> str:
        if self.username is not None:
            return self.username
        return self.id or ""


@dataclass(frozen=True)
class RankedEntry:
    record: ParticipantRecord
    wagered_amount: float
    rank: int
    prize: float | None = None

    @property
    def identity(self) -> str:
        return self.record.identity

    def __str__(self) -> str:
        return "[RankedEntry]: #{} {} wagered: {} prize: {}".format(
            self.rank, self.identity, self.wagered_amount, self.prize
        )
