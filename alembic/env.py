"""Migration environment for the riskmetrics schema.

Migrations run over the same asyncpg engine the batch jobs use.  The URL
comes from riskmetrics Settings (DATABASE_URL); alembic.ini only supplies
a fallback.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Importing the models package attaches the reference, market data,
# statistic and portfolio tables to Base.metadata.
from riskmetrics.infrastructure.database import Base, settings  # noqa: E402
import riskmetrics.infrastructure.persistence.models  # noqa: E402, F401

target_metadata = Base.metadata


def _database_url() -> str:
    return settings.database_url or config.get_main_option("sqlalchemy.url") or ""


def _configure(**kwargs) -> None:  # type: ignore[no-untyped-def]
    # compare_type catches Double / Integer drift on the statistic columns
    context.configure(target_metadata=target_metadata, compare_type=True, **kwargs)


def run_offline() -> None:
    """Render the migration SQL (e.g. for review) without a live database."""
    _configure(
        url=_database_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection) -> None:  # type: ignore[no-untyped-def]
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_online() -> None:
    """Apply migrations through a short-lived async engine."""
    engine = create_async_engine(_database_url())
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    asyncio.run(run_online())
