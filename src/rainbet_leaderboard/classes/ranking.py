"""Rank affiliates by wagered amount and derive the leaderboard aggregates."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from .affiliate import ParticipantRecord, RankedEntry
from .amounts import parse_amount

PODIUM_SIZE = 3
TABLE_SIZE = 10
MASK_PLACEHOLDER = "—"


@dataclass
class LeaderboardSummary:
    entries: list[RankedEntry] = field(default_factory=list)

    @property
    def participant_count(self) -> int:
        return len(self.entries)

    @property
    def total_wagered(self) -> float:
        return sum((entry.wagered_amount for entry in self.entries), 0.0)

    def top(self, n: int) -> list[RankedEntry]:
        """First ``n`` entries; shorter when fewer participants exist."""
        return self.entries[: max(0, n)]

    @property
    def podium(self) -> list[RankedEntry]:
        return self.top(PODIUM_SIZE)

    @property
    def table(self) -> list[RankedEntry]:
        return self.top(TABLE_SIZE)

    @property
    def leader(self) -> RankedEntry | None:
        return self.entries[0] if self.entries else None


def rank_records(
    records: Iterable[ParticipantRecord],
    prizes: Mapping[int, float] | None = None,
) -> LeaderboardSummary:
    """Sort by wagered amount, highest first, and number the rows from 1.

    Equal amounts keep their input order and still get distinct ranks.
    """
    prizes = prizes or {}
    parsed = [(record, parse_amount(record.wagered_amount)) for record in records]
    # sorted() is stable, so ties stay in input order
    parsed = sorted(parsed, key=lambda item: item[1], reverse=True)
    entries = [
        RankedEntry(record=record, wagered_amount=amount, rank=position, prize=prizes.get(position))
        for position, (record, amount) in enumerate(parsed, start=1)
    ]
    return LeaderboardSummary(entries)


def top_entry(records: Iterable[ParticipantRecord]) -> RankedEntry | None:
    return rank_records(records).leader


def mask_identity(identity: str | None) -> str:
    """Hide the middle of a name for public display: ``abcdef`` -> ``ab***f``."""
    if not identity:
        return MASK_PLACEHOLDER
    if len(identity) <= 4:
        return identity
    return identity[:2] + "*" * (len(identity) - 3) + identity[-1]
