"""Receive/forward pipeline configuration."""

from pydantic import BaseModel, Field


class RelayConfig(BaseModel):
    """Limits and constants for receiving, forwarding and querying hits."""

    # Counted in code points, so multi-byte bodies store more than body_limit bytes.
    body_limit: int = Field(
        default=4096,
        gt=0,
        description="Maximum number of body characters stored per hit",
    )
    forward_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for the single outbound forward request",
    )
    task_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound on the lifetime of a background task",
    )
    shutdown_grace_seconds: float = Field(
        default=5.0,
        ge=0,
        description="How long shutdown waits for background tasks before cancelling",
    )
    retention_days: int = Field(default=7, gt=0, description="Purge hits older than this")
    page_size: int = Field(default=500, gt=0, description="Maximum hits returned per query")
    recent_limit: int = Field(default=50, gt=0, description="Recent hits included in stats")
    timezone_offset_hours: int = Field(
        default=7,
        ge=-12,
        le=14,
        description="Fixed UTC offset defining calendar days for date filters",
    )
    line_endpoint: str = Field(default="line", description="Endpoint carrying LINE webhooks")
    unknown_scan_days: int = Field(
        default=7,
        gt=0,
        description="Window scanned for unknown identifiers",
    )
    unknown_scan_limit: int = Field(
        default=2000,
        gt=0,
        description="Maximum hits scanned for unknown identifiers",
    )
