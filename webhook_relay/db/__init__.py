"""PostgreSQL pool, store errors and Alembic migrations."""

from webhook_relay.db.errors import ConnectionError, StoreError
from webhook_relay.db.pool import PostgresPool

__all__ = ["ConnectionError", "PostgresPool", "StoreError"]
