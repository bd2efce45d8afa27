"""Domain models for wg_wagering — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.wg_common.enums import WagerStatus


@dataclass
class Wager:
    """One stake on one side of a match.

    Everything except status / settled_at / actual_payout is fixed at
    placement. status leaves PENDING exactly once, via a compare-and-set in
    the repository.
    """

    id: str
    account_id: str
    match_id: str
    market_type: str
    side: str                      # Side value
    stake: int                     # chips, > 0
    price: int                     # moneyline quote locked at placement
    potential_payout: int          # chips, stake included
    status: str = WagerStatus.PENDING.value
    placed_at: datetime | None = None
    settled_at: datetime | None = None
    actual_payout: int | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == WagerStatus.PENDING


@dataclass(frozen=True)
class WagerStats:
    total: int
    pending: int
    won: int
    lost: int
    cancelled: int
    total_wagered: int      # stakes of non-cancelled wagers
    settled_wagered: int    # stakes of WON + LOST
    total_returned: int     # payouts of WON

    @property
    def net_profit(self) -> int:
        return self.total_returned - self.settled_wagered

    @property
    def win_rate(self) -> float:
        decided = self.won + self.lost
        return round(self.won * 100 / decided, 2) if decided else 0.0


@dataclass(frozen=True)
class MatchBook:
    """Per-match wager counts by status plus the ledger totals behind them."""

    match_id: str
    pending: int
    won: int
    lost: int
    cancelled: int
    staked: int         # -sum(WAGER_PLACED entries)
    paid_out: int       # sum(WAGER_WON entries)
    refunded: int       # sum(WAGER_REFUNDED entries)

    @property
    def total(self) -> int:
        return self.pending + self.won + self.lost + self.cancelled
