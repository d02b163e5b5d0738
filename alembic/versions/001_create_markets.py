"""001: create markets table and the updated_at trigger function

Revision ID: 001
Revises: 
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_touch_updated_at()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at := NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TABLE markets (
            id              VARCHAR(64)     PRIMARY KEY,
            start_time      BIGINT,
            duration        BIGINT,
            resolved        BOOLEAN         NOT NULL DEFAULT FALSE,
            outcome         VARCHAR(3),
            total_supply    NUMERIC(78, 0)  NOT NULL DEFAULT 0,
            yes_balance     NUMERIC(78, 0)  NOT NULL DEFAULT 0,
            no_balance      NUMERIC(78, 0)  NOT NULL DEFAULT 0,
            pool_balance    NUMERIC(78, 0)  NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            resolved_at     TIMESTAMPTZ,
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_markets_start_time_gte_0   CHECK (start_time IS NULL OR start_time >= 0),
            CONSTRAINT ck_markets_duration_gte_0     CHECK (duration IS NULL OR duration >= 0),
            CONSTRAINT ck_markets_outcome            CHECK (outcome IS NULL OR outcome IN ('YES', 'NO')),
            CONSTRAINT ck_markets_resolved_outcome   CHECK (resolved = (outcome IS NOT NULL)),
            CONSTRAINT ck_markets_total_supply_gte_0 CHECK (total_supply >= 0),
            CONSTRAINT ck_markets_yes_balance_gte_0  CHECK (yes_balance >= 0),
            CONSTRAINT ck_markets_no_balance_gte_0   CHECK (no_balance >= 0),
            CONSTRAINT ck_markets_pool_balance_gte_0 CHECK (pool_balance >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_markets_updated_at
            BEFORE UPDATE ON markets
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute(
        "COMMENT ON TABLE markets IS 'Binary outcome markets; WAD amounts at 1e18 scale';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS markets CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_touch_updated_at();")
