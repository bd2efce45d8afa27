"""LedgerRepository — concrete implementation of LedgerRepositoryProtocol.

Balance mutations are a single atomic PostgreSQL UPDATE ... RETURNING guarded
by `balance + amount >= 0`; a result of 0 rows means the debit was not funded
(or the account is missing). The row lock taken by the UPDATE is held until
the caller's transaction ends, so the entry insert and the business mutation
that triggered it commit or roll back together.

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.wg_common.errors import InternalError
from src.wg_ledger.domain.models import Account, LedgerEntry

_GET_ACCOUNT_SQL = text("""
    SELECT id, balance, version, created_at, updated_at
    FROM accounts
    WHERE id = :account_id
""")

_GET_ACCOUNT_FOR_UPDATE_SQL = text("""
    SELECT id, balance, version, created_at, updated_at
    FROM accounts
    WHERE id = :account_id
    FOR UPDATE
""")

_CREATE_ACCOUNT_SQL = text("""
    INSERT INTO accounts (id, balance)
    VALUES (:account_id, :balance)
    ON CONFLICT (id) DO NOTHING
""")

_APPLY_DELTA_SQL = text("""
    UPDATE accounts
    SET balance = balance + :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE id = :account_id AND balance + :amount >= 0
    RETURNING balance
""")

_INSERT_ENTRY_SQL = text("""
    INSERT INTO ledger_entries
        (account_id, category, amount, balance_before, balance_after,
         wager_id, description)
    VALUES
        (:account_id, :category, :amount, :balance_before, :balance_after,
         :wager_id, :description)
    RETURNING id, account_id, category, amount, balance_before, balance_after,
              wager_id, description, created_at
""")

_LIST_ENTRIES_SQL = text("""
    SELECT id, account_id, category, amount, balance_before, balance_after,
           wager_id, description, created_at
    FROM ledger_entries
    WHERE account_id = :account_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < :cursor_id)
      AND (CAST(:category AS VARCHAR) IS NULL OR category = :category)
    ORDER BY id DESC
    LIMIT :limit
""")

_ENTRY_TOTALS_SQL = text("""
    SELECT
        COALESCE(SUM(amount), 0) AS delta_sum,
        (SELECT balance_after FROM ledger_entries
          WHERE account_id = :account_id ORDER BY id DESC LIMIT 1) AS last_balance_after
    FROM ledger_entries
    WHERE account_id = :account_id
""")


def _row_to_account(row: object) -> Account:
    return Account(
        id=row.id,  # type: ignore[attr-defined]
        balance=row.balance,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_entry(row: object) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,  # type: ignore[attr-defined]
        account_id=row.account_id,  # type: ignore[attr-defined]
        category=row.category,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        balance_before=row.balance_before,  # type: ignore[attr-defined]
        balance_after=row.balance_after,  # type: ignore[attr-defined]
        wager_id=row.wager_id,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class LedgerRepository:
    """Concrete repository — all balance changes atomic at the SQL level."""

    async def get_account(
        self, db: AsyncSession, account_id: str, for_update: bool = False
    ) -> Account | None:
        sql = _GET_ACCOUNT_FOR_UPDATE_SQL if for_update else _GET_ACCOUNT_SQL
        row = (await db.execute(sql, {"account_id": account_id})).fetchone()
        return _row_to_account(row) if row else None

    async def create_account_if_absent(
        self, db: AsyncSession, account_id: str, starting_balance: int
    ) -> Account:
        await db.execute(
            _CREATE_ACCOUNT_SQL, {"account_id": account_id, "balance": starting_balance}
        )
        account = await self.get_account(db, account_id)
        if account is None:
            raise InternalError(f"Account {account_id} missing right after insert")
        return account

    async def apply_delta(
        self,
        db: AsyncSession,
        account_id: str,
        amount: int,
        category: str,
        description: str,
        wager_id: str | None,
    ) -> LedgerEntry | None:
        row = (
            await db.execute(_APPLY_DELTA_SQL, {"account_id": account_id, "amount": amount})
        ).fetchone()
        if row is None:
            return None
        balance_after = row.balance
        entry_row = (
            await db.execute(
                _INSERT_ENTRY_SQL,
                {
                    "account_id": account_id,
                    "category": category,
                    "amount": amount,
                    "balance_before": balance_after - amount,
                    "balance_after": balance_after,
                    "wager_id": wager_id,
                    "description": description,
                },
            )
        ).fetchone()
        if entry_row is None:
            raise InternalError("Ledger insert returned no rows")
        return _row_to_entry(entry_row)

    async def list_entries(
        self,
        db: AsyncSession,
        account_id: str,
        cursor_id: int | None,
        limit: int,
        category: str | None,
    ) -> list[LedgerEntry]:
        result = await db.execute(
            _LIST_ENTRIES_SQL,
            {
                "account_id": account_id,
                "cursor_id": cursor_id,
                "category": category,
                "limit": limit,
            },
        )
        return [_row_to_entry(row) for row in result.fetchall()]

    async def entry_totals(
        self, db: AsyncSession, account_id: str
    ) -> tuple[int, int | None]:
        row = (await db.execute(_ENTRY_TOTALS_SQL, {"account_id": account_id})).fetchone()
        if row is None:
            return 0, None
        return int(row.delta_sum), row.last_balance_after
