"""Global enums — must match DB CHECK constraints exactly (see alembic/versions)."""

from enum import Enum


class MatchStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    LIVE = "LIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class MarketType(str, Enum):
    """Only the two-way moneyline market is priced and accepted."""
    MONEYLINE = "MONEYLINE"


class Side(str, Enum):
    A = "A"
    B = "B"

    @property
    def other(self) -> "Side":
        return Side.B if self is Side.A else Side.A


class WagerStatus(str, Enum):
    PENDING = "PENDING"
    WON = "WON"
    LOST = "LOST"
    CANCELLED = "CANCELLED"


class LedgerCategory(str, Enum):
    WAGER_PLACED = "WAGER_PLACED"
    WAGER_WON = "WAGER_WON"
    WAGER_REFUNDED = "WAGER_REFUNDED"
    ADJUSTMENT = "ADJUSTMENT"
