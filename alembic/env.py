"""Alembic runner for the outcome-market schema (raw-SQL revisions, asyncpg)."""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from config.settings import settings

VERSION_TABLE = "outcome_market_alembic_version"

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

database_url = config.get_main_option("sqlalchemy.url") or settings.DATABASE_URL


def _configure(**kwargs: object) -> None:
    # Revisions are hand-written op.execute() DDL: no metadata to autogenerate from.
    context.configure(target_metadata=None, version_table=VERSION_TABLE, **kwargs)


def _apply(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def _apply_online() -> None:
    connectable = create_async_engine(database_url)
    try:
        async with connectable.connect() as connection:
            await connection.run_sync(_apply)
    finally:
        await connectable.dispose()


if context.is_offline_mode():
    _configure(url=database_url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()
else:
    asyncio.run(_apply_online())
