"""Storage backend configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

StorageBackend = Literal["postgres", "inmemory"]


class PostgresConfig(BaseModel):
    """PostgreSQL connection pool configuration."""

    dsn: str | None = Field(
        default=None,
        description="Connection string; falls back to RELAY_DATABASE_URL / DATABASE_URL",
    )
    min_size: int = Field(default=1, ge=0, description="Minimum pool connections")
    max_size: int = Field(default=10, ge=1, description="Maximum pool connections")
    command_timeout: float = Field(default=30.0, gt=0, description="Query timeout (s)")


class StorageConfig(BaseModel):
    """Storage configuration for hits, forward rules and aliases."""

    backend: StorageBackend = Field(
        default="postgres",
        description="Storage backend to use",
    )
    postgres: PostgresConfig = Field(
        default_factory=PostgresConfig,
        description="PostgreSQL settings",
    )
