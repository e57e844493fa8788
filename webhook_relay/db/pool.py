"""Shared asyncpg pool for the PostgreSQL stores."""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import asyncpg

from webhook_relay.config.models.storage import PostgresConfig
from webhook_relay.db.errors import ConnectionError
from webhook_relay.observability.logging import get_logger

logger = get_logger(__name__)

DSN_ENV_VARS = ("RELAY_DATABASE_URL", "DATABASE_URL")


def dsn_from_env() -> str:
    """DSN from RELAY_DATABASE_URL / DATABASE_URL, else from POSTGRES_* parts."""
    for name in DSN_ENV_VARS:
        dsn = os.environ.get(name)
        if dsn:
            return dsn

    host = os.environ.get("POSTGRES_HOST", "localhost")
    port = os.environ.get("POSTGRES_PORT", "5432")
    user = os.environ.get("POSTGRES_USER", "relay")
    password = os.environ.get("POSTGRES_PASSWORD", "relay")
    database = os.environ.get("POSTGRES_DB", "relay")
    return f"postgresql://{user}:{password}@{host}:{port}/{database}"


class PostgresPool:
    """Lazily connected asyncpg pool.

    Backend failures surface as webhook_relay.db.errors.ConnectionError so
    the API can answer 503 without knowing about asyncpg.
    """

    def __init__(
        self,
        dsn: str | None = None,
        min_size: int = 1,
        max_size: int = 10,
        command_timeout: float = 30.0,
        max_inactive_connection_lifetime: float = 300.0,
    ) -> None:
        self._dsn = dsn or dsn_from_env()
        self._min_size = min_size
        self._max_size = max_size
        self._command_timeout = command_timeout
        self._max_idle = max_inactive_connection_lifetime
        self._pool: asyncpg.Pool | None = None

    @classmethod
    def from_config(cls, config: PostgresConfig) -> "PostgresPool":
        return cls(
            dsn=config.dsn,
            min_size=config.min_size,
            max_size=config.max_size,
            command_timeout=config.command_timeout,
        )

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> None:
        """Open the pool; a no-op when already open.

        Raises:
            ConnectionError: If the database is unreachable
        """
        if self._pool is not None:
            return
        try:
            self._pool = await asyncpg.create_pool(
                dsn=self._dsn,
                min_size=self._min_size,
                max_size=self._max_size,
                command_timeout=self._command_timeout,
                max_inactive_connection_lifetime=self._max_idle,
            )
        except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.error("postgres_pool_connection_failed", error=str(e))
            raise ConnectionError(f"Failed to connect to PostgreSQL: {e}", cause=e) from e
        logger.info("postgres_pool_opened", min_size=self._min_size, max_size=self._max_size)

    async def close(self) -> None:
        if self._pool is None:
            return
        await self._pool.close()
        self._pool = None
        logger.info("postgres_pool_closed")

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        """Borrow a connection, opening the pool on first use."""
        if self._pool is None:
            await self.connect()
        try:
            async with self._pool.acquire() as connection:
                yield connection
        except asyncpg.PostgresError as e:
            logger.error("postgres_query_failed", error=str(e))
            raise ConnectionError(f"PostgreSQL error: {e}", cause=e) from e

    async def health_check(self) -> bool:
        """True when a trivial query round-trips."""
        if self._pool is None:
            return False
        try:
            async with self._pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
        except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.warning("postgres_health_check_failed", error=str(e))
            return False
        return True
