"""Inbound webhook endpoints at signed URLs."""

from typing import Any

from fastapi import APIRouter, Request

from webhook_relay.api.dependencies import PipelineDep
from webhook_relay.relay.pipeline import ReceiveResult

router = APIRouter(prefix="/w")


def _ack(result: ReceiveResult) -> dict[str, Any]:
    return result.model_dump(mode="json", exclude_none=True)


@router.post("/{endpoint}/{token}")
async def receive_raw(
    endpoint: str,
    token: str,
    request: Request,
    pipeline: PipelineDep,
) -> dict[str, Any]:
    """Record a webhook body as-is."""
    result = await pipeline.receive_raw(endpoint, token, request.body, request.headers)
    return _ack(result)


@router.post("/{endpoint}/{token}/github")
async def receive_github(
    endpoint: str,
    token: str,
    request: Request,
    pipeline: PipelineDep,
) -> dict[str, Any]:
    """Record a GitHub webhook as a one-line digest."""
    result = await pipeline.receive_github(endpoint, token, request.body, request.headers)
    return _ack(result)


@router.post("/{endpoint}/{token}/{suffix}")
async def receive_suffix(
    endpoint: str,
    token: str,
    suffix: str,
    request: Request,
    pipeline: PipelineDep,
) -> dict[str, Any]:
    """Record a webhook body tagged with a path suffix."""
    result = await pipeline.receive_suffix(
        endpoint, token, suffix, request.body, request.headers
    )
    return _ack(result)
