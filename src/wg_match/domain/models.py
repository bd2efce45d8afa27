"""Domain models for wg_match — pure dataclasses.

Matches and competitors are produced by the tournament importer; this service
only reads them, flips the wagering flag / status through the admin flow and
writes ratings back after settlement.
"""

from dataclasses import dataclass
from datetime import datetime

from src.wg_common.enums import MatchStatus, Side

# Allowed forward moves; anything else (including staying put) is rejected.
_TRANSITIONS: dict[MatchStatus, frozenset[MatchStatus]] = {
    MatchStatus.SCHEDULED: frozenset({MatchStatus.LIVE, MatchStatus.COMPLETED, MatchStatus.CANCELLED}),
    MatchStatus.LIVE: frozenset({MatchStatus.COMPLETED, MatchStatus.CANCELLED}),
    MatchStatus.COMPLETED: frozenset(),
    MatchStatus.CANCELLED: frozenset(),
}


def can_transition(current: MatchStatus, target: MatchStatus) -> bool:
    return target in _TRANSITIONS[current]


@dataclass
class Competitor:
    id: str
    name: str
    rating: int
    wins: int = 0
    losses: int = 0
    total_matches: int = 0


@dataclass
class Match:
    id: str
    competitor_a_id: str
    competitor_b_id: str
    status: str                      # MatchStatus value
    wagering_open: bool
    winner_id: str | None = None
    score_a: int | None = None
    score_b: int | None = None
    ratings_applied: bool = False
    scheduled_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def side_of(self, competitor_id: str) -> Side | None:
        if competitor_id == self.competitor_a_id:
            return Side.A
        if competitor_id == self.competitor_b_id:
            return Side.B
        return None

    def competitor_id_for(self, side: Side) -> str:
        return self.competitor_a_id if side is Side.A else self.competitor_b_id

    @property
    def accepts_wagers(self) -> bool:
        return self.wagering_open and self.status == MatchStatus.SCHEDULED
