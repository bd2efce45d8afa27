"""Pydantic schemas and cursor utilities for the wallet API."""

import base64
import json

from pydantic import BaseModel

from src.wg_common.chips import chips_to_display
from src.wg_ledger.domain.models import LedgerEntry, Reconciliation


def cursor_encode(last_id: int) -> str:
    """Encode a BIGINT primary key into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode a cursor string back to the last seen id. Returns None on garbage."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return int(payload["id"])
    except (ValueError, KeyError, TypeError):
        return None


class BalanceResponse(BaseModel):
    account_id: str
    balance: int
    balance_display: str


class LedgerEntryItem(BaseModel):
    id: int
    category: str
    amount: int
    amount_display: str
    balance_before: int
    balance_after: int
    wager_id: str | None
    description: str | None
    created_at: str  # ISO8601 string

    @classmethod
    def from_domain(cls, e: LedgerEntry) -> "LedgerEntryItem":
        return cls(
            id=e.id,
            category=e.category,
            amount=e.amount,
            amount_display=chips_to_display(e.amount),
            balance_before=e.balance_before,
            balance_after=e.balance_after,
            wager_id=e.wager_id,
            description=e.description,
            created_at=e.created_at.isoformat() if e.created_at else "",
        )


class LedgerResponse(BaseModel):
    items: list[LedgerEntryItem]
    next_cursor: str | None
    has_more: bool


class ReconciliationResponse(BaseModel):
    account_id: str
    ok: bool
    balance: int
    starting_balance: int
    delta_sum: int
    last_balance_after: int | None

    @classmethod
    def from_domain(cls, r: Reconciliation) -> "ReconciliationResponse":
        return cls(
            account_id=r.account_id,
            ok=r.ok,
            balance=r.balance,
            starting_balance=r.starting_balance,
            delta_sum=r.delta_sum,
            last_balance_after=r.last_balance_after,
        )
