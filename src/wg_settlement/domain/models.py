"""Settlement result types."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SettlementSummary:
    """Match-wide counts, read back from the wager table after a settlement run.

    Counts describe the match, not the run, so a repeated settle_match returns
    the same numbers. failed_count is the only per-run figure.
    """

    match_id: str
    total_wagers: int
    won_count: int
    lost_count: int
    pending_count: int
    failed_count: int = 0

    @property
    def settled_count(self) -> int:
        return self.won_count + self.lost_count

    def to_event(self) -> dict[str, Any]:
        return {
            "matchId": self.match_id,
            "totalWagers": self.total_wagers,
            "settledCount": self.settled_count,
            "wonCount": self.won_count,
            "lostCount": self.lost_count,
        }


@dataclass(frozen=True)
class CancellationSummary:
    match_id: str
    total_wagers: int
    cancelled_count: int
    failed_count: int = 0


@dataclass(frozen=True)
class HousePosition:
    """The house's net on one match, rebuilt from ledger entries."""

    match_id: str
    total_wagers: int
    staked: int
    paid_out: int
    refunded: int

    @property
    def net(self) -> int:
        return self.staked - self.paid_out - self.refunded
