"""005: create market_events table

Revision ID: 005
Revises: 004
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE market_events (
            id          BIGSERIAL       PRIMARY KEY,
            market_id   VARCHAR(64)     NOT NULL REFERENCES markets (id) ON DELETE CASCADE,
            event_type  VARCHAR(16)     NOT NULL,
            holder      VARCHAR(128),
            outcome     VARCHAR(3),
            amount_in   NUMERIC(78, 0)  NOT NULL DEFAULT 0,
            amount_out  NUMERIC(78, 0)  NOT NULL DEFAULT 0,
            rate        NUMERIC(78, 0)  NOT NULL DEFAULT 0,
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_market_events_type CHECK (
                event_type IN ('INITIALIZE', 'FUND', 'BUY', 'CONVERT', 'RESOLVE', 'CLAIM')
            )
        );
    """)
    op.execute("CREATE INDEX idx_market_events_market ON market_events (market_id, id);")
    op.execute(
        "COMMENT ON TABLE market_events IS 'Append-only journal of market operations';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS market_events CASCADE;")
