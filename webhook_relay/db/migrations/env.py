"""Alembic environment for the relay schema.

Runs the hand-written revisions in ``versions/`` over an asyncpg engine.
The database URL comes from, in order: ``storage.postgres.dsn`` in the
relay settings, RELAY_DATABASE_URL / DATABASE_URL, then alembic.ini.
"""

import asyncio
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from webhook_relay.config import get_settings
from webhook_relay.db.pool import DSN_ENV_VARS

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# No ORM models; revisions use op.* directly
target_metadata = None


def database_url() -> str:
    url = get_settings().storage.postgres.dsn
    if not url:
        url = next((os.environ[name] for name in DSN_ENV_VARS if os.environ.get(name)), None)
    if not url:
        url = config.get_main_option("sqlalchemy.url", "")
    # SQLAlchemy needs the async driver named explicitly
    if url.startswith("postgresql://"):
        url = "postgresql+asyncpg://" + url.removeprefix("postgresql://")
    return url


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting."""
    context.configure(
        url=database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = database_url()
    engine = async_engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
