"""002: create positions table

Revision ID: 002
Revises: 001
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE positions (
            market_id   VARCHAR(64)     NOT NULL REFERENCES markets (id) ON DELETE CASCADE,
            holder      VARCHAR(128)    NOT NULL,
            yes_amount  NUMERIC(78, 0)  NOT NULL DEFAULT 0,
            no_amount   NUMERIC(78, 0)  NOT NULL DEFAULT 0,
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (market_id, holder),
            CONSTRAINT ck_positions_yes_amount_gte_0 CHECK (yes_amount >= 0),
            CONSTRAINT ck_positions_no_amount_gte_0  CHECK (no_amount >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_positions_holder ON positions (holder);")
    op.execute("""
        CREATE TRIGGER trg_positions_updated_at
            BEFORE UPDATE ON positions
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS positions CASCADE;")
