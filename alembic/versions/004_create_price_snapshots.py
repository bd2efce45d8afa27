"""004: create price_snapshots table

Revision ID: 004
Revises: 003
Create Date: 2026-10-16
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE price_snapshots (
            id              BIGSERIAL       PRIMARY KEY,
            match_id        VARCHAR(64)     NOT NULL REFERENCES matches (id),
            market_type     VARCHAR(20)     NOT NULL,
            price_a         INT             NOT NULL,
            price_b         INT             NOT NULL,
            volume_a        BIGINT          NOT NULL DEFAULT 0,
            volume_b        BIGINT          NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_price_market_type CHECK (market_type IN ('MONEYLINE')),
            CONSTRAINT ck_price_a_range CHECK (price_a BETWEEN -10000 AND 10000 AND price_a <> 0),
            CONSTRAINT ck_price_b_range CHECK (price_b BETWEEN -10000 AND 10000 AND price_b <> 0),
            CONSTRAINT ck_price_volumes_gte_0 CHECK (volume_a >= 0 AND volume_b >= 0)
        );
    """)
    op.execute("""
        CREATE INDEX idx_price_lane
        ON price_snapshots (match_id, market_type, id DESC);
    """)
    op.execute("COMMENT ON TABLE price_snapshots IS 'Append-only price lane per (match, market); newest row is current';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS price_snapshots CASCADE;")
