"""API request and error models."""

from webhook_relay.api.models.errors import ErrorCode, ErrorResponse
from webhook_relay.api.models.requests import (
    AliasRequest,
    ForwardRuleRequest,
    ResolveAliasRequest,
)

__all__ = [
    "ErrorCode",
    "ErrorResponse",
    "AliasRequest",
    "ForwardRuleRequest",
    "ResolveAliasRequest",
]
