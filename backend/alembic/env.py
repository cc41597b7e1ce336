"""
Alembic Migration Environment
===============================

Applies the users/places migrations with the application's own async engine
settings. SQLite needs batch mode because it cannot ALTER most constraints.
Run `alembic upgrade head` from the backend/ directory.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine
from alembic import context

from picplace.config import settings
from picplace.database import Base

# Models register themselves on Base.metadata when imported
from picplace.models.user import User  # noqa: F401
from picplace.models.place import Place  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def do_run_migrations(connection):
    context.configure(
        connection=connection,
        target_metadata=Base.metadata,
        render_as_batch=connection.dialect.name == "sqlite",
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations() -> None:
    # DATABASE_URL is the single source of truth; alembic.ini has no URL
    engine = create_async_engine(settings.database_url, poolclass=pool.NullPool)
    async with engine.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await engine.dispose()


if context.is_offline_mode():
    raise SystemExit("Offline SQL generation is not supported; run against a database.")

asyncio.run(run_migrations())
