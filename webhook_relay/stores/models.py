"""Row models for hits, forward rules and aliases."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class NewHit(BaseModel):
    """Values for a hit about to be inserted."""

    model_config = ConfigDict(frozen=True)

    endpoint: str = Field(..., description="Endpoint name from the URL path")
    suffix: str | None = Field(default=None, description="Tagged suffix, e.g. '/github'")
    received_at: datetime = Field(..., description="Receipt time (UTC)")
    response_ms: int = Field(..., ge=0, description="Time spent reading the body")
    body_length: int = Field(..., ge=0, description="Length of the raw body")
    body: str | None = Field(default=None, description="Stored (possibly truncated) body")


class Hit(NewHit):
    """One recorded inbound webhook request.

    Immutable except for the forward_* columns, which are patched once
    after the forward attempt completes.
    """

    id: int = Field(..., description="Row identifier")
    forward_status: int | None = Field(
        default=None,
        description="Forward HTTP status, 0 on transport failure",
    )
    forward_ms: int | None = Field(default=None, description="Forward latency")
    forward_error: str | None = Field(default=None, description="Transport error message")


class ForwardOutcome(BaseModel):
    """Result of a single forward attempt."""

    model_config = ConfigDict(frozen=True)

    status: int
    elapsed_ms: int
    error: str | None = None

    @property
    def ok(self) -> bool:
        """True for a 2xx response."""
        return 200 <= self.status < 300


class ForwardRule(BaseModel):
    """Per-endpoint forwarding configuration, unique by endpoint."""

    endpoint: str
    forward_url: str
    enabled: bool = True
    persist: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Alias(BaseModel):
    """Human-readable label for an opaque identifier, unique by value."""

    id: int
    value: str
    label: str
    created_at: datetime = Field(default_factory=utc_now)


class HitTotals(BaseModel):
    """Aggregate numbers over the whole hit table."""

    total_requests: int = 0
    avg_response_ms: float = 0.0
