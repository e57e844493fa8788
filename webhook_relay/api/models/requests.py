"""Request bodies for the management API.

Fields are optional at the schema level so that missing values produce
the API's own 400 messages rather than a generic validation error.
"""

from pydantic import BaseModel, Field


class ForwardRuleRequest(BaseModel):
    """Body of PUT /api/forward-rules/{endpoint}."""

    forward_url: str | None = Field(default=None, description="Target URL")
    enabled: bool | None = Field(default=None, description="Forward hits (default true)")
    persist: bool | None = Field(default=None, description="Store hits (default true)")


class AliasRequest(BaseModel):
    """Body of PUT /api/aliases."""

    value: str | None = Field(default=None, description="Raw identifier")
    label: str | None = Field(default=None, description="Display label")


class ResolveAliasRequest(BaseModel):
    """Body of POST /api/aliases/resolve."""

    id: str | None = Field(default=None, description="LINE user or group id")
    groupId: str | None = Field(default=None, description="Group the user was seen in")
