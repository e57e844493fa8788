"""Logging and metrics settings ([observability.*] tables)."""

from typing import Literal

from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["json", "console"]


class LoggingConfig(BaseModel):
    """structlog output."""

    level: LogLevel = Field(default="INFO", description="Minimum level emitted")
    format: LogFormat = Field(default="json", description="JSON lines or console rendering")
    redact_pii: bool = Field(
        default=True,
        description="Mask secrets, emails and webhook tokens before rendering",
    )


class MetricsConfig(BaseModel):
    """Prometheus exposition."""

    enabled: bool = Field(default=True, description="Serve the metrics endpoint")
    path: str = Field(default="/metrics", description="Route for the text exposition")


class ObservabilityConfig(BaseModel):
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)
