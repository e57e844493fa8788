"""PostgreSQL implementations of the relay stores.

Uses asyncpg with parameterized SQL. Schema is created by the Alembic
migration in webhook_relay/db/migrations.
"""

from datetime import datetime
from typing import Any

from webhook_relay.db.errors import ConnectionError
from webhook_relay.db.pool import PostgresPool
from webhook_relay.observability.logging import get_logger
from webhook_relay.stores.interface import AliasStore, ForwardRuleStore, HitStore
from webhook_relay.stores.models import Alias, ForwardRule, Hit, HitTotals, NewHit

logger = get_logger(__name__)

_HIT_COLUMNS = """
    id, endpoint, suffix, received_at, response_ms, body_length, body,
    forward_status, forward_ms, forward_error
"""


class PostgresHitStore(HitStore):
    """PostgreSQL implementation of HitStore."""

    def __init__(self, pool: PostgresPool) -> None:
        """Initialize with connection pool.

        Args:
            pool: PostgreSQL connection pool
        """
        self._pool = pool

    async def record(self, hit: NewHit) -> int:
        try:
            async with self._pool.acquire() as conn:
                hit_id = await conn.fetchval(
                    """
                    INSERT INTO webhook_hits (
                        endpoint, suffix, received_at, response_ms, body_length, body
                    ) VALUES ($1, $2, $3, $4, $5, $6)
                    RETURNING id
                    """,
                    hit.endpoint,
                    hit.suffix,
                    hit.received_at,
                    hit.response_ms,
                    hit.body_length,
                    hit.body,
                )
                logger.debug("hit_recorded", hit_id=hit_id, endpoint=hit.endpoint)
                return int(hit_id)
        except Exception as e:
            logger.error("postgres_record_hit_error", endpoint=hit.endpoint, error=str(e))
            raise ConnectionError(f"Failed to record hit: {e}", cause=e) from e

    async def get(self, hit_id: int) -> Hit | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"SELECT {_HIT_COLUMNS} FROM webhook_hits WHERE id = $1",
                    hit_id,
                )
                return self._row_to_hit(row) if row else None
        except Exception as e:
            logger.error("postgres_get_hit_error", hit_id=hit_id, error=str(e))
            raise ConnectionError(f"Failed to get hit: {e}", cause=e) from e

    async def set_forward_outcome(
        self,
        hit_id: int,
        *,
        status: int,
        forward_ms: int,
        error: str | None,
    ) -> None:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    """
                    UPDATE webhook_hits
                    SET forward_status = $2, forward_ms = $3, forward_error = $4
                    WHERE id = $1
                    """,
                    hit_id,
                    status,
                    forward_ms,
                    error,
                )
        except Exception as e:
            logger.error("postgres_forward_outcome_error", hit_id=hit_id, error=str(e))
            raise ConnectionError(f"Failed to update forward outcome: {e}", cause=e) from e

    async def query(
        self,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
        endpoint: str | None = None,
        limit: int = 500,
        newest_first: bool = True,
    ) -> list[Hit]:
        query = f"SELECT {_HIT_COLUMNS} FROM webhook_hits WHERE TRUE"
        params: list[Any] = []

        if start is not None:
            params.append(start)
            query += f" AND received_at >= ${len(params)}"

        if end is not None:
            params.append(end)
            query += f" AND received_at < ${len(params)}"

        if endpoint is not None:
            params.append(endpoint)
            query += f" AND endpoint = ${len(params)}"

        direction = "DESC" if newest_first else "ASC"
        params.append(limit)
        query += f" ORDER BY received_at {direction}, id {direction} LIMIT ${len(params)}"

        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(query, *params)
                return [self._row_to_hit(row) for row in rows]
        except Exception as e:
            logger.error("postgres_query_hits_error", endpoint=endpoint, error=str(e))
            raise ConnectionError(f"Failed to query hits: {e}", cause=e) from e

    async def purge_before(self, cutoff: datetime) -> int:
        try:
            async with self._pool.acquire() as conn:
                status = await conn.execute(
                    "DELETE FROM webhook_hits WHERE received_at < $1",
                    cutoff,
                )
                # asyncpg returns the command tag, e.g. "DELETE 12"
                return int(status.split()[-1])
        except Exception as e:
            logger.error("postgres_purge_hits_error", error=str(e))
            raise ConnectionError(f"Failed to purge hits: {e}", cause=e) from e

    async def totals(self) -> HitTotals:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    "SELECT COUNT(*) AS total, AVG(response_ms) AS avg_ms FROM webhook_hits"
                )
                return HitTotals(
                    total_requests=row["total"] or 0,
                    avg_response_ms=float(row["avg_ms"] or 0),
                )
        except Exception as e:
            logger.error("postgres_hit_totals_error", error=str(e))
            raise ConnectionError(f"Failed to compute totals: {e}", cause=e) from e

    async def count_since(self, since: datetime) -> int:
        try:
            async with self._pool.acquire() as conn:
                return int(
                    await conn.fetchval(
                        "SELECT COUNT(*) FROM webhook_hits WHERE received_at >= $1",
                        since,
                    )
                )
        except Exception as e:
            logger.error("postgres_count_hits_error", error=str(e))
            raise ConnectionError(f"Failed to count hits: {e}", cause=e) from e

    async def oldest_received_at(self) -> datetime | None:
        try:
            async with self._pool.acquire() as conn:
                return await conn.fetchval("SELECT MIN(received_at) FROM webhook_hits")
        except Exception as e:
            logger.error("postgres_oldest_hit_error", error=str(e))
            raise ConnectionError(f"Failed to read oldest hit: {e}", cause=e) from e

    async def storage_size_bytes(self) -> int | None:
        try:
            async with self._pool.acquire() as conn:
                return int(
                    await conn.fetchval("SELECT pg_database_size(current_database())")
                )
        except Exception as e:
            logger.warning("postgres_database_size_error", error=str(e))
            return None

    def _row_to_hit(self, row: Any) -> Hit:
        return Hit(
            id=row["id"],
            endpoint=row["endpoint"],
            suffix=row["suffix"],
            received_at=row["received_at"],
            response_ms=row["response_ms"],
            body_length=row["body_length"],
            body=row["body"],
            forward_status=row["forward_status"],
            forward_ms=row["forward_ms"],
            forward_error=row["forward_error"],
        )


class PostgresForwardRuleStore(ForwardRuleStore):
    """PostgreSQL implementation of ForwardRuleStore."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def get(self, endpoint: str) -> ForwardRule | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    """
                    SELECT endpoint, forward_url, enabled, persist, created_at, updated_at
                    FROM forward_rules
                    WHERE endpoint = $1
                    """,
                    endpoint,
                )
                return ForwardRule(**dict(row)) if row else None
        except Exception as e:
            logger.error("postgres_get_rule_error", endpoint=endpoint, error=str(e))
            raise ConnectionError(f"Failed to get forward rule: {e}", cause=e) from e

    async def list_all(self) -> list[ForwardRule]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    """
                    SELECT endpoint, forward_url, enabled, persist, created_at, updated_at
                    FROM forward_rules
                    ORDER BY endpoint
                    """
                )
                return [ForwardRule(**dict(row)) for row in rows]
        except Exception as e:
            logger.error("postgres_list_rules_error", error=str(e))
            raise ConnectionError(f"Failed to list forward rules: {e}", cause=e) from e

    async def upsert(
        self,
        endpoint: str,
        forward_url: str,
        *,
        enabled: bool = True,
        persist: bool = True,
    ) -> ForwardRule:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    """
                    INSERT INTO forward_rules (
                        endpoint, forward_url, enabled, persist, created_at, updated_at
                    ) VALUES ($1, $2, $3, $4, NOW(), NOW())
                    ON CONFLICT (endpoint) DO UPDATE SET
                        forward_url = EXCLUDED.forward_url,
                        enabled = EXCLUDED.enabled,
                        persist = EXCLUDED.persist,
                        updated_at = NOW()
                    RETURNING endpoint, forward_url, enabled, persist, created_at, updated_at
                    """,
                    endpoint,
                    forward_url,
                    enabled,
                    persist,
                )
                logger.debug("forward_rule_saved", endpoint=endpoint)
                return ForwardRule(**dict(row))
        except Exception as e:
            logger.error("postgres_upsert_rule_error", endpoint=endpoint, error=str(e))
            raise ConnectionError(f"Failed to save forward rule: {e}", cause=e) from e

    async def delete(self, endpoint: str) -> bool:
        try:
            async with self._pool.acquire() as conn:
                status = await conn.execute(
                    "DELETE FROM forward_rules WHERE endpoint = $1",
                    endpoint,
                )
                return status.split()[-1] != "0"
        except Exception as e:
            logger.error("postgres_delete_rule_error", endpoint=endpoint, error=str(e))
            raise ConnectionError(f"Failed to delete forward rule: {e}", cause=e) from e


class PostgresAliasStore(AliasStore):
    """PostgreSQL implementation of AliasStore."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def list_all(self) -> list[Alias]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    "SELECT id, value, label, created_at FROM aliases ORDER BY id"
                )
                return [Alias(**dict(row)) for row in rows]
        except Exception as e:
            logger.error("postgres_list_aliases_error", error=str(e))
            raise ConnectionError(f"Failed to list aliases: {e}", cause=e) from e

    async def upsert(self, value: str, label: str) -> Alias:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    """
                    INSERT INTO aliases (value, label, created_at)
                    VALUES ($1, $2, NOW())
                    ON CONFLICT (value) DO UPDATE SET label = EXCLUDED.label
                    RETURNING id, value, label, created_at
                    """,
                    value,
                    label,
                )
                return Alias(**dict(row))
        except Exception as e:
            logger.error("postgres_upsert_alias_error", error=str(e))
            raise ConnectionError(f"Failed to save alias: {e}", cause=e) from e

    async def delete(self, alias_id: int) -> bool:
        try:
            async with self._pool.acquire() as conn:
                status = await conn.execute("DELETE FROM aliases WHERE id = $1", alias_id)
                return status.split()[-1] != "0"
        except Exception as e:
            logger.error("postgres_delete_alias_error", alias_id=alias_id, error=str(e))
            raise ConnectionError(f"Failed to delete alias: {e}", cause=e) from e
