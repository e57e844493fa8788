"""Receive pipeline: authenticate, read, persist, forward, acknowledge.

Each variant (raw, suffix, GitHub) runs the same steps:

1. Verify the path token (when a secret is configured) before the body
   is read; a mismatch raises InvalidTokenError.
2. Buffer the body as text and time the read.
3. Look up the endpoint's forward rule (absent: persist on, forward off).
4. Insert a hit unless the rule disables persistence.
5. Submit the forward to the background runner when the rule is enabled.
6. Return an acknowledgement that does not wait for the forward.
"""

import time
from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime
from typing import Literal

import httpx
from pydantic import BaseModel, Field

from webhook_relay.config.models.relay import RelayConfig
from webhook_relay.observability.logging import get_logger
from webhook_relay.observability.metrics import AUTH_FAILURES, HITS_PERSISTED, HITS_RECEIVED
from webhook_relay.relay import tokens
from webhook_relay.relay.aliases import LineAliasResolver
from webhook_relay.relay.background import BackgroundRunner
from webhook_relay.relay.errors import InvalidTokenError
from webhook_relay.relay.forward import execute_forward
from webhook_relay.relay.github import digest_body
from webhook_relay.stores.interface import ForwardRuleStore, HitStore
from webhook_relay.stores.models import NewHit, utc_now

logger = get_logger(__name__)

BodyReader = Callable[[], Awaitable[bytes]]
Variant = Literal["raw", "suffix", "github"]

GITHUB_SUFFIX = "/github"
UNKNOWN_EVENT = "unknown"


class ReceiveResult(BaseModel):
    """Acknowledgement returned to the webhook sender."""

    ok: bool = True
    endpoint: str
    received_at: datetime
    response_ms: int
    suffix: str | None = None
    event: str | None = None
    hit_id: int | None = Field(default=None, exclude=True)


class ReceivePipeline:
    """Handles inbound webhooks for all receive variants."""

    def __init__(
        self,
        *,
        hit_store: HitStore,
        rule_store: ForwardRuleStore,
        runner: BackgroundRunner,
        client: httpx.AsyncClient,
        secret: str | None,
        config: RelayConfig,
        alias_resolver: LineAliasResolver | None = None,
    ) -> None:
        """Initialize pipeline.

        Args:
            hit_store: Where hits are recorded
            rule_store: Source of per-endpoint forward rules
            runner: Background runner for forwards and alias lookups
            client: Shared HTTP client for forwards
            secret: Shared secret; None disables token checks
            config: Relay limits (body limit, forward timeout, LINE endpoint)
            alias_resolver: LINE resolver; None disables auto-aliasing
        """
        self._hits = hit_store
        self._rules = rule_store
        self._runner = runner
        self._client = client
        self._secret = secret
        self._config = config
        self._alias_resolver = alias_resolver

    def authenticate(self, endpoint: str, token: str) -> None:
        """Verify the path token for an endpoint.

        Raises:
            InvalidTokenError: If a secret is configured and the token differs
        """
        if self._secret is None:
            return
        if not tokens.verify(endpoint, token, self._secret):
            AUTH_FAILURES.labels(kind="webhook_token").inc()
            logger.warning("webhook_token_rejected", endpoint=endpoint)
            raise InvalidTokenError(endpoint)

    async def _read(self, read_body: BodyReader) -> tuple[str, datetime, int]:
        start = time.perf_counter()
        raw = await read_body()
        body = raw.decode("utf-8", errors="replace")
        received_at = utc_now()
        response_ms = round((time.perf_counter() - start) * 1000)
        return body, received_at, response_ms

    async def _store_and_forward(
        self,
        *,
        endpoint: str,
        suffix: str | None,
        stored_body: str,
        raw_body: str,
        headers: Mapping[str, str],
        received_at: datetime,
        response_ms: int,
    ) -> int | None:
        rule = await self._rules.get(endpoint)
        persist = rule is None or rule.persist
        forward = rule is not None and rule.enabled and bool(rule.forward_url)

        hit_id = None
        if persist:
            hit_id = await self._hits.record(
                NewHit(
                    endpoint=endpoint,
                    suffix=suffix,
                    received_at=received_at,
                    response_ms=response_ms,
                    body_length=len(raw_body),
                    body=stored_body,
                )
            )
            HITS_PERSISTED.labels(endpoint=endpoint).inc()

        if forward:
            self._runner.submit(
                "forward",
                execute_forward(
                    self._client,
                    self._hits,
                    hit_id=hit_id,
                    endpoint=endpoint,
                    forward_url=rule.forward_url,
                    body=raw_body,
                    headers=dict(headers),
                    timeout_seconds=self._config.forward_timeout_seconds,
                ),
            )

        logger.info(
            "webhook_received",
            endpoint=endpoint,
            suffix=suffix,
            hit_id=hit_id,
            persisted=persist,
            forwarded=forward,
            body_length=len(raw_body),
            response_ms=response_ms,
        )
        return hit_id

    async def receive_raw(
        self,
        endpoint: str,
        token: str,
        read_body: BodyReader,
        headers: Mapping[str, str],
    ) -> ReceiveResult:
        """Store the body as-is (truncated)."""
        self.authenticate(endpoint, token)
        body, received_at, response_ms = await self._read(read_body)
        HITS_RECEIVED.labels(endpoint=endpoint, variant="raw").inc()

        hit_id = await self._store_and_forward(
            endpoint=endpoint,
            suffix=None,
            stored_body=body[: self._config.body_limit],
            raw_body=body,
            headers=headers,
            received_at=received_at,
            response_ms=response_ms,
        )

        if endpoint == self._config.line_endpoint and self._alias_resolver is not None:
            self._runner.submit("auto_alias", self._alias_resolver.auto_alias(body))

        return ReceiveResult(
            endpoint=endpoint,
            received_at=received_at,
            response_ms=response_ms,
            hit_id=hit_id,
        )

    async def receive_suffix(
        self,
        endpoint: str,
        token: str,
        suffix: str,
        read_body: BodyReader,
        headers: Mapping[str, str],
    ) -> ReceiveResult:
        """Store the body as-is, tagged with /<suffix>."""
        self.authenticate(endpoint, token)
        body, received_at, response_ms = await self._read(read_body)
        HITS_RECEIVED.labels(endpoint=endpoint, variant="suffix").inc()

        hit_id = await self._store_and_forward(
            endpoint=endpoint,
            suffix=f"/{suffix}",
            stored_body=body[: self._config.body_limit],
            raw_body=body,
            headers=headers,
            received_at=received_at,
            response_ms=response_ms,
        )
        return ReceiveResult(
            endpoint=endpoint,
            suffix=suffix,
            received_at=received_at,
            response_ms=response_ms,
            hit_id=hit_id,
        )

    async def receive_github(
        self,
        endpoint: str,
        token: str,
        read_body: BodyReader,
        headers: Mapping[str, str],
    ) -> ReceiveResult:
        """Store a digest of the GitHub event; forward the raw body."""
        self.authenticate(endpoint, token)
        body, received_at, response_ms = await self._read(read_body)
        HITS_RECEIVED.labels(endpoint=endpoint, variant="github").inc()

        event = httpx.Headers(dict(headers)).get("x-github-event") or UNKNOWN_EVENT
        hit_id = await self._store_and_forward(
            endpoint=endpoint,
            suffix=GITHUB_SUFFIX,
            stored_body=digest_body(event, body),
            raw_body=body,
            headers=headers,
            received_at=received_at,
            response_ms=response_ms,
        )
        return ReceiveResult(
            endpoint=endpoint,
            event=event,
            received_at=received_at,
            response_ms=response_ms,
            hit_id=hit_id,
        )
