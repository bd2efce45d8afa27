"""Domain models for wg_ledger — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Account:
    id: str                 # opaque account id handed over by the identity boundary
    balance: int            # chips, never negative
    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class LedgerEntry:
    id: int                          # BIGSERIAL
    account_id: str
    category: str                    # LedgerCategory value
    amount: int                      # chips, positive=credit negative=debit
    balance_before: int
    balance_after: int
    wager_id: str | None = None
    description: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class Reconciliation:
    account_id: str
    balance: int
    starting_balance: int
    delta_sum: int
    last_balance_after: int | None

    @property
    def ok(self) -> bool:
        if self.balance < 0 or self.balance != self.starting_balance + self.delta_sum:
            return False
        return self.last_balance_after is None or self.last_balance_after == self.balance
