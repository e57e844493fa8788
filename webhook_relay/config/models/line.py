"""LINE Messaging API configuration."""

from pydantic import BaseModel, Field


class LineConfig(BaseModel):
    """Credentials for resolving LINE user and group names."""

    channel_access_token: str | None = Field(
        default=None,
        description="LINE channel access token; alias resolution is disabled when unset",
    )
    api_base_url: str = Field(
        default="https://api.line.me",
        description="LINE Messaging API origin",
    )
    timeout_seconds: float = Field(default=10.0, gt=0, description="Lookup timeout")
