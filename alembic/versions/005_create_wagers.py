"""005: create wagers table

Revision ID: 005
Revises: 004
Create Date: 2026-10-16
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE wagers (
            id                  VARCHAR(32)     PRIMARY KEY,
            account_id          VARCHAR(64)     NOT NULL REFERENCES accounts (id),
            match_id            VARCHAR(64)     NOT NULL REFERENCES matches (id),
            market_type         VARCHAR(20)     NOT NULL,
            side                VARCHAR(1)      NOT NULL,
            stake               BIGINT          NOT NULL,
            price               INT             NOT NULL,
            potential_payout    BIGINT          NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'PENDING',
            placed_at           TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            settled_at          TIMESTAMPTZ,
            actual_payout       BIGINT,
            CONSTRAINT ck_wagers_stake_gt_0 CHECK (stake > 0),
            CONSTRAINT ck_wagers_payout_gte_stake CHECK (potential_payout >= stake),
            CONSTRAINT ck_wagers_side CHECK (side IN ('A', 'B')),
            CONSTRAINT ck_wagers_market_type CHECK (market_type IN ('MONEYLINE')),
            CONSTRAINT ck_wagers_status CHECK (
                status IN ('PENDING', 'WON', 'LOST', 'CANCELLED')
            ),
            CONSTRAINT ck_wagers_settled_at CHECK (
                (status = 'PENDING') = (settled_at IS NULL)
            )
        );
    """)
    op.execute("CREATE INDEX idx_wagers_account ON wagers (account_id, placed_at DESC);")
    op.execute("""
        CREATE INDEX idx_wagers_match_pending
        ON wagers (match_id, market_type, side)
        WHERE status = 'PENDING';
    """)
    op.execute("ALTER TABLE ledger_entries ADD CONSTRAINT fk_ledger_wager FOREIGN KEY (wager_id) REFERENCES wagers (id) DEFERRABLE INITIALLY DEFERRED;")


def downgrade() -> None:
    op.execute("ALTER TABLE ledger_entries DROP CONSTRAINT IF EXISTS fk_ledger_wager;")
    op.execute("DROP TABLE IF EXISTS wagers CASCADE;")
