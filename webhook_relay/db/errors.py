"""Errors raised by the PostgreSQL stores.

Store implementations wrap asyncpg exceptions in these so that callers
depend only on this module. The API maps StoreError to 503.
"""


class StoreError(Exception):
    """A storage backend operation failed."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ConnectionError(StoreError):
    """The database was unreachable or rejected the statement."""
