"""API server and session auth configuration models."""

from pydantic import BaseModel, Field, field_validator


class APIConfig(BaseModel):
    """Configuration for the HTTP API server."""

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8787, ge=1, le=65535, description="Port number")
    workers: int = Field(default=1, ge=1, description="Number of worker processes")
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins",
    )
    public_base_url: str | None = Field(
        default=None,
        description="Origin used when building signed URLs (defaults to the request origin)",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v


class AuthConfig(BaseModel):
    """Shared secret used for both webhook tokens and dashboard sessions.

    The value has the form ``user:pass``. When unset, webhook tokens are not
    checked and every API request is authorized.
    """

    api_token: str | None = Field(default=None, description="Shared 'user:pass' secret")
    cookie_name: str = Field(default="api_token", description="Session cookie name")
    cookie_max_age: int = Field(default=86400, ge=0, description="Session cookie lifetime (s)")

    @field_validator("api_token", mode="before")
    @classmethod
    def empty_as_none(cls, v: str | None) -> str | None:
        """Treat an empty secret as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v
