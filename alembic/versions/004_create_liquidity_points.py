"""004: create liquidity_points table

Revision ID: 004
Revises: 003
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE liquidity_points (
            provider    VARCHAR(128)    PRIMARY KEY,
            points      NUMERIC(78, 0)  NOT NULL DEFAULT 0,
            updated_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_liquidity_points_gte_0 CHECK (points >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_liquidity_points_updated_at
            BEFORE UPDATE ON liquidity_points
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS liquidity_points CASCADE;")
