"""Single-shot forwarding of received webhooks."""

import asyncio
import time
from collections.abc import Mapping

import httpx

from webhook_relay import __version__
from webhook_relay.observability.logging import get_logger
from webhook_relay.observability.metrics import FORWARD_LATENCY, FORWARDS
from webhook_relay.stores.interface import HitStore
from webhook_relay.stores.models import ForwardOutcome

logger = get_logger(__name__)

USER_AGENT = f"webhook-relay/{__version__}"
DEFAULT_CONTENT_TYPE = "application/json"


def outbound_headers(original: Mapping[str, str]) -> dict[str, str]:
    """Headers sent to the forward target.

    Only content-type, user-agent and x-github-event are carried over;
    everything else from the inbound request is dropped.
    """
    incoming = httpx.Headers(dict(original))
    headers = {
        "content-type": incoming.get("content-type") or DEFAULT_CONTENT_TYPE,
        "user-agent": USER_AGENT,
    }
    github_event = incoming.get("x-github-event")
    if github_event:
        headers["x-github-event"] = github_event
    return headers


async def execute_forward(
    client: httpx.AsyncClient,
    hit_store: HitStore,
    *,
    hit_id: int | None,
    endpoint: str,
    forward_url: str,
    body: str,
    headers: Mapping[str, str],
    timeout_seconds: float = 10.0,
) -> ForwardOutcome:
    """POST the raw body to forward_url once and record the outcome.

    Transport failures produce status 0 with the error message; there
    is no retry. The outcome is written back to the hit when hit_id is
    set and discarded otherwise.

    Args:
        client: Shared HTTP client
        hit_store: Store holding the hit to patch
        hit_id: Id of the persisted hit, or None when persistence is off
        endpoint: Endpoint name, for logs and metrics
        forward_url: Target URL
        body: Raw inbound body
        headers: Inbound request headers
        timeout_seconds: Deadline for the whole request, body included

    Returns:
        The forward outcome
    """
    start = time.perf_counter()
    status = 0
    error: str | None = None

    try:
        async with asyncio.timeout(timeout_seconds):
            response = await client.post(
                forward_url,
                content=body.encode("utf-8"),
                headers=outbound_headers(headers),
                timeout=timeout_seconds,
            )
        status = response.status_code
    except TimeoutError:
        error = f"Forward timed out after {timeout_seconds:g}s"
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        error = str(e) or type(e).__name__

    elapsed = time.perf_counter() - start
    outcome = ForwardOutcome(status=status, elapsed_ms=round(elapsed * 1000), error=error)

    FORWARD_LATENCY.labels(endpoint=endpoint).observe(elapsed)
    if outcome.ok:
        FORWARDS.labels(endpoint=endpoint, outcome="success").inc()
        logger.info(
            "forward_delivered",
            endpoint=endpoint,
            hit_id=hit_id,
            status=status,
            forward_ms=outcome.elapsed_ms,
        )
    elif status == 0:
        FORWARDS.labels(endpoint=endpoint, outcome="transport_error").inc()
        logger.warning(
            "forward_transport_error",
            endpoint=endpoint,
            hit_id=hit_id,
            error=error,
            forward_ms=outcome.elapsed_ms,
        )
    else:
        FORWARDS.labels(endpoint=endpoint, outcome="http_error").inc()
        logger.warning(
            "forward_rejected",
            endpoint=endpoint,
            hit_id=hit_id,
            status=status,
            forward_ms=outcome.elapsed_ms,
        )

    if hit_id is not None:
        await hit_store.set_forward_outcome(
            hit_id,
            status=outcome.status,
            forward_ms=outcome.elapsed_ms,
            error=outcome.error,
        )

    return outcome
