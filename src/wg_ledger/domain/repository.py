"""Repository Protocol — dependency inversion for testability.

Unit tests inject an in-memory fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.wg_ledger.domain.models import Account, LedgerEntry


class LedgerRepositoryProtocol(Protocol):
    async def get_account(
        self, db: AsyncSession, account_id: str, for_update: bool = False
    ) -> Account | None: ...

    async def create_account_if_absent(
        self, db: AsyncSession, account_id: str, starting_balance: int
    ) -> Account: ...

    async def apply_delta(
        self,
        db: AsyncSession,
        account_id: str,
        amount: int,
        category: str,
        description: str,
        wager_id: str | None,
    ) -> LedgerEntry | None:
        """Move the balance by `amount` and append one entry.

        Returns None (and changes nothing) when the balance would go negative
        or the account does not exist.
        """
        ...

    async def list_entries(
        self,
        db: AsyncSession,
        account_id: str,
        cursor_id: int | None,
        limit: int,
        category: str | None,
    ) -> list[LedgerEntry]: ...

    async def entry_totals(
        self, db: AsyncSession, account_id: str
    ) -> tuple[int, int | None]:
        """Return (sum of all deltas, balance_after of the latest entry or None)."""
        ...
