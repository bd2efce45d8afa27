"""002: create ledger_entries table

Revision ID: 002
Revises: 001
Create Date: 2026-10-16
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger_entries (
            id              BIGSERIAL       PRIMARY KEY,
            account_id      VARCHAR(64)     NOT NULL REFERENCES accounts (id),
            category        VARCHAR(30)     NOT NULL,
            amount          BIGINT          NOT NULL,
            balance_before  BIGINT          NOT NULL,
            balance_after   BIGINT          NOT NULL,
            wager_id        VARCHAR(32),
            description     VARCHAR(500),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_category CHECK (
                category IN ('WAGER_PLACED', 'WAGER_WON', 'WAGER_REFUNDED', 'ADJUSTMENT')
            ),
            CONSTRAINT ck_ledger_amount_ne_0 CHECK (amount <> 0),
            CONSTRAINT ck_ledger_balance_gte_0 CHECK (balance_after >= 0),
            CONSTRAINT ck_ledger_balance_chain CHECK (balance_after = balance_before + amount)
        );
    """)
    op.execute("CREATE INDEX idx_ledger_account_id ON ledger_entries (account_id, id DESC);")
    op.execute("""
        CREATE INDEX idx_ledger_wager
        ON ledger_entries (wager_id)
        WHERE wager_id IS NOT NULL;
    """)
    op.execute("COMMENT ON TABLE ledger_entries IS 'Append-only chip movements, never updated or deleted';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_entries CASCADE;")
