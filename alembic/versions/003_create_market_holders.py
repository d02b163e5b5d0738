"""003: create market_holders table

Revision ID: 003
Revises: 002
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE market_holders (
            market_id   VARCHAR(64)     NOT NULL REFERENCES markets (id) ON DELETE CASCADE,
            outcome     VARCHAR(3)      NOT NULL,
            holder      VARCHAR(128)    NOT NULL,
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (market_id, outcome, holder),
            CONSTRAINT ck_market_holders_outcome CHECK (outcome IN ('YES', 'NO'))
        );
    """)
    op.execute(
        "COMMENT ON TABLE market_holders IS "
        "'Holders ever credited per side; one row per (market, outcome, holder)';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS market_holders CASCADE;")
