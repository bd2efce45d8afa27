"""Ledger services.

LedgerService is the only code path that moves chips. Its debit/credit join
the caller's open transaction and never commit: the balance change and the
business event that caused it (wager placed, wager won, refund) must become
visible together or not at all.

WalletApplicationService is the read-side used by the wallet API; it commits
only the lazy account creation.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.wg_common.chips import chips_to_display
from src.wg_common.enums import LedgerCategory
from src.wg_common.errors import (
    AccountNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
)
from src.wg_ledger.application.schemas import (
    BalanceResponse,
    LedgerEntryItem,
    LedgerResponse,
    ReconciliationResponse,
    cursor_decode,
    cursor_encode,
)
from src.wg_ledger.domain.constants import DEFAULT_STARTING_BALANCE
from src.wg_ledger.domain.models import Account, LedgerEntry, Reconciliation
from src.wg_ledger.domain.repository import LedgerRepositoryProtocol
from src.wg_ledger.infrastructure.persistence import LedgerRepository

logger = logging.getLogger(__name__)


def _check_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidAmountError(amount)


class LedgerService:
    def __init__(
        self,
        repo: LedgerRepositoryProtocol | None = None,
        starting_balance: int = DEFAULT_STARTING_BALANCE,
    ) -> None:
        self._repo: LedgerRepositoryProtocol = repo or LedgerRepository()
        self.starting_balance = starting_balance

    async def ensure_account(self, db: AsyncSession, account_id: str) -> Account:
        """Get the account, creating it with the starting balance on first access."""
        account = await self._repo.get_account(db, account_id)
        if account is not None:
            return account
        logger.info("Opening account %s with %d chips", account_id, self.starting_balance)
        return await self._repo.create_account_if_absent(
            db, account_id, self.starting_balance
        )

    async def balance(
        self, db: AsyncSession, account_id: str, for_update: bool = False
    ) -> int:
        """Current balance. for_update=True row-locks the account until the caller's
        transaction ends, so a balance check cannot go stale before the debit."""
        account = await self._repo.get_account(db, account_id, for_update=for_update)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account.balance

    async def debit(
        self,
        db: AsyncSession,
        account_id: str,
        amount: int,
        category: str,
        description: str,
        wager_id: str | None = None,
    ) -> LedgerEntry:
        _check_amount(amount)
        entry = await self._repo.apply_delta(
            db, account_id, -amount, category, description, wager_id
        )
        if entry is None:
            account = await self._repo.get_account(db, account_id)
            if account is None:
                raise AccountNotFoundError(account_id)
            raise InsufficientFundsError(amount, account.balance)
        return entry

    async def credit(
        self,
        db: AsyncSession,
        account_id: str,
        amount: int,
        category: str,
        description: str,
        wager_id: str | None = None,
    ) -> LedgerEntry:
        _check_amount(amount)
        entry = await self._repo.apply_delta(
            db, account_id, amount, category, description, wager_id
        )
        if entry is None:
            raise AccountNotFoundError(account_id)
        return entry

    async def adjust(
        self, db: AsyncSession, account_id: str, amount: int, description: str
    ) -> LedgerEntry:
        """Signed manual correction or bonus, recorded as an ADJUSTMENT entry.

        Opens the account first if needed. A negative amount is a debit and is
        refused when it would take the balance below zero.
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount == 0:
            raise InvalidAmountError(amount)
        await self.ensure_account(db, account_id)
        category = LedgerCategory.ADJUSTMENT.value
        if amount > 0:
            entry = await self.credit(db, account_id, amount, category, description)
        else:
            entry = await self.debit(db, account_id, -amount, category, description)
        logger.info("Adjusted %s by %d chips: %s", account_id, amount, description)
        return entry

    async def list_entries(
        self,
        db: AsyncSession,
        account_id: str,
        cursor_id: int | None = None,
        limit: int = 50,
        category: str | None = None,
    ) -> list[LedgerEntry]:
        return await self._repo.list_entries(db, account_id, cursor_id, limit, category)

    async def reconcile(self, db: AsyncSession, account_id: str) -> Reconciliation:
        """Check balance == starting balance + sum(deltas) == latest balance_after."""
        account = await self._repo.get_account(db, account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        delta_sum, last_after = await self._repo.entry_totals(db, account_id)
        result = Reconciliation(
            account_id=account_id,
            balance=account.balance,
            starting_balance=self.starting_balance,
            delta_sum=delta_sum,
            last_balance_after=last_after,
        )
        if not result.ok:
            logger.error(
                "Ledger mismatch for %s: balance=%d starting=%d deltas=%d last_after=%s",
                account_id, account.balance, self.starting_balance, delta_sum, last_after,
            )
        return result


class WalletApplicationService:
    def __init__(self, ledger: LedgerService | None = None) -> None:
        self._ledger = ledger or LedgerService()

    async def get_balance(self, db: AsyncSession, account_id: str) -> BalanceResponse:
        try:
            account = await self._ledger.ensure_account(db, account_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return BalanceResponse(
            account_id=account_id,
            balance=account.balance,
            balance_display=chips_to_display(account.balance),
        )

    async def list_ledger(
        self,
        db: AsyncSession,
        account_id: str,
        cursor: str | None,
        limit: int,
        category: str | None,
    ) -> LedgerResponse:
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        entries = await self._ledger.list_entries(
            db, account_id, cursor_decode(cursor), limit + 1, category
        )
        has_more = len(entries) > limit
        page = entries[:limit]
        items = [LedgerEntryItem.from_domain(e) for e in page]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return LedgerResponse(items=items, next_cursor=next_cursor, has_more=has_more)

    async def reconcile(self, db: AsyncSession, account_id: str) -> ReconciliationResponse:
        result = await self._ledger.reconcile(db, account_id)
        return ReconciliationResponse.from_domain(result)
