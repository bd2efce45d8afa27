"""001: create common functions and accounts table

Revision ID: 001
Revises: 
Create Date: 2026-10-16
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TABLE accounts (
            id                  VARCHAR(64) PRIMARY KEY,
            balance             BIGINT      NOT NULL DEFAULT 0,
            version             BIGINT      NOT NULL DEFAULT 0,
            created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_accounts_balance_gte_0 CHECK (balance >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_accounts_updated_at
            BEFORE UPDATE ON accounts
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE accounts IS 'Chip balances, keyed by the identity provider account id';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS accounts CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
