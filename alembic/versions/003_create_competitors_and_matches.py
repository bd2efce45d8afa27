"""003: create competitors and matches tables

Both are filled by the tournament importer. The wagering service only flips
status / wagering_open / winner / scores on matches and writes ratings back.

Revision ID: 003
Revises: 002
Create Date: 2026-10-16
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE competitors (
            id              VARCHAR(64)     PRIMARY KEY,
            name            VARCHAR(200)    NOT NULL,
            rating          INT             NOT NULL DEFAULT 1000,
            wins            INT             NOT NULL DEFAULT 0,
            losses          INT             NOT NULL DEFAULT 0,
            total_matches   INT             NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_competitors_counters CHECK (
                wins >= 0 AND losses >= 0 AND total_matches >= wins + losses
            )
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_competitors_updated_at
            BEFORE UPDATE ON competitors
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TABLE matches (
            id                  VARCHAR(64)     PRIMARY KEY,
            competitor_a_id     VARCHAR(64)     NOT NULL REFERENCES competitors (id),
            competitor_b_id     VARCHAR(64)     NOT NULL REFERENCES competitors (id),
            status              VARCHAR(20)     NOT NULL DEFAULT 'SCHEDULED',
            wagering_open       BOOLEAN         NOT NULL DEFAULT TRUE,
            winner_id           VARCHAR(64)     REFERENCES competitors (id),
            score_a             INT,
            score_b             INT,
            ratings_applied     BOOLEAN         NOT NULL DEFAULT FALSE,
            scheduled_at        TIMESTAMPTZ,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_matches_status CHECK (
                status IN ('SCHEDULED', 'LIVE', 'COMPLETED', 'CANCELLED')
            ),
            CONSTRAINT ck_matches_distinct_competitors CHECK (competitor_a_id <> competitor_b_id),
            CONSTRAINT ck_matches_winner CHECK (
                winner_id IS NULL OR winner_id IN (competitor_a_id, competitor_b_id)
            ),
            CONSTRAINT ck_matches_completed_has_winner CHECK (
                status <> 'COMPLETED' OR winner_id IS NOT NULL
            ),
            CONSTRAINT ck_matches_open_only_scheduled CHECK (
                NOT wagering_open OR status = 'SCHEDULED'
            )
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_matches_updated_at
            BEFORE UPDATE ON matches
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("CREATE INDEX idx_matches_status ON matches (status);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS matches CASCADE;")
    op.execute("DROP TABLE IF EXISTS competitors CASCADE;")
