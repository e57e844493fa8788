"""Dependency injection for API routes.

Provides FastAPI dependencies for stores, the HTTP client, the background
runner and the pipeline/service objects built on them. Instances are
created once per process from settings and can be overridden for testing.
"""

from typing import Annotated

import httpx
from fastapi import Depends

from webhook_relay.config import Settings, get_settings
from webhook_relay.db.pool import PostgresPool
from webhook_relay.observability.logging import get_logger
from webhook_relay.relay.aliases import LineAliasResolver
from webhook_relay.relay.background import BackgroundRunner
from webhook_relay.relay.pipeline import ReceivePipeline
from webhook_relay.relay.service import RelayService
from webhook_relay.stores.inmemory import (
    InMemoryAliasStore,
    InMemoryForwardRuleStore,
    InMemoryHitStore,
)
from webhook_relay.stores.interface import AliasStore, ForwardRuleStore, HitStore
from webhook_relay.stores.models import utc_now
from webhook_relay.stores.postgres import (
    PostgresAliasStore,
    PostgresForwardRuleStore,
    PostgresHitStore,
)

logger = get_logger(__name__)

# Shared resources
_postgres_pool: PostgresPool | None = None
_http_client: httpx.AsyncClient | None = None
_runner: BackgroundRunner | None = None

# Store instances - created once and reused
_hit_store: HitStore | None = None
_rule_store: ForwardRuleStore | None = None
_alias_store: AliasStore | None = None

_started_at = utc_now()


async def get_postgres_pool() -> PostgresPool:
    """Get the shared PostgreSQL connection pool.

    Creates and connects the pool on first access.

    Returns:
        Connected PostgresPool instance
    """
    global _postgres_pool
    if _postgres_pool is None:
        pool = PostgresPool.from_config(get_settings().storage.postgres)
        await pool.connect()
        _postgres_pool = pool
    return _postgres_pool


def _uses_postgres() -> bool:
    return get_settings().storage.backend == "postgres"


async def get_hit_store() -> HitStore:
    """Get the HitStore for the configured backend."""
    global _hit_store
    if _hit_store is None:
        if _uses_postgres():
            _hit_store = PostgresHitStore(await get_postgres_pool())
        else:
            _hit_store = InMemoryHitStore()
        logger.info("hit_store_initialized", store_type=type(_hit_store).__name__)
    return _hit_store


async def get_rule_store() -> ForwardRuleStore:
    """Get the ForwardRuleStore for the configured backend."""
    global _rule_store
    if _rule_store is None:
        if _uses_postgres():
            _rule_store = PostgresForwardRuleStore(await get_postgres_pool())
        else:
            _rule_store = InMemoryForwardRuleStore()
        logger.info("rule_store_initialized", store_type=type(_rule_store).__name__)
    return _rule_store


async def get_alias_store() -> AliasStore:
    """Get the AliasStore for the configured backend."""
    global _alias_store
    if _alias_store is None:
        if _uses_postgres():
            _alias_store = PostgresAliasStore(await get_postgres_pool())
        else:
            _alias_store = InMemoryAliasStore()
        logger.info("alias_store_initialized", store_type=type(_alias_store).__name__)
    return _alias_store


def get_http_client() -> httpx.AsyncClient:
    """Get the shared outbound HTTP client."""
    global _http_client
    if _http_client is None:
        _http_client = httpx.AsyncClient()
    return _http_client


def get_runner() -> BackgroundRunner:
    """Get the background runner for forwards and alias lookups."""
    global _runner
    if _runner is None:
        relay = get_settings().relay
        _runner = BackgroundRunner(
            task_timeout_seconds=relay.task_timeout_seconds,
            shutdown_grace_seconds=relay.shutdown_grace_seconds,
        )
    return _runner


SettingsDep = Annotated[Settings, Depends(get_settings)]
HitStoreDep = Annotated[HitStore, Depends(get_hit_store)]
RuleStoreDep = Annotated[ForwardRuleStore, Depends(get_rule_store)]
AliasStoreDep = Annotated[AliasStore, Depends(get_alias_store)]
HttpClientDep = Annotated[httpx.AsyncClient, Depends(get_http_client)]
RunnerDep = Annotated[BackgroundRunner, Depends(get_runner)]


def get_alias_resolver(
    settings: SettingsDep,
    client: HttpClientDep,
    alias_store: AliasStoreDep,
) -> LineAliasResolver | None:
    """LINE alias resolver, or None when no channel token is configured."""
    token = settings.line.channel_access_token
    if not token:
        return None
    return LineAliasResolver(
        client,
        alias_store,
        token,
        api_base_url=settings.line.api_base_url,
        timeout_seconds=settings.line.timeout_seconds,
    )


AliasResolverDep = Annotated[LineAliasResolver | None, Depends(get_alias_resolver)]


def get_pipeline(
    settings: SettingsDep,
    hit_store: HitStoreDep,
    rule_store: RuleStoreDep,
    runner: RunnerDep,
    client: HttpClientDep,
    alias_resolver: AliasResolverDep,
) -> ReceivePipeline:
    """Receive pipeline wired to the shared stores and runner."""
    return ReceivePipeline(
        hit_store=hit_store,
        rule_store=rule_store,
        runner=runner,
        client=client,
        secret=settings.auth.api_token,
        config=settings.relay,
        alias_resolver=alias_resolver,
    )


def get_service(
    settings: SettingsDep,
    hit_store: HitStoreDep,
    rule_store: RuleStoreDep,
    alias_store: AliasStoreDep,
) -> RelayService:
    """Query and management service over the shared stores."""
    return RelayService(
        hit_store=hit_store,
        rule_store=rule_store,
        alias_store=alias_store,
        config=settings.relay,
        started_at=_started_at,
    )


PipelineDep = Annotated[ReceivePipeline, Depends(get_pipeline)]
ServiceDep = Annotated[RelayService, Depends(get_service)]


async def shutdown_dependencies() -> None:
    """Drain background work and release shared resources."""
    if _runner is not None:
        await _runner.shutdown()
    if _http_client is not None:
        await _http_client.aclose()
    if _postgres_pool is not None:
        await _postgres_pool.close()
    await reset_dependencies()
    logger.info("dependencies_shutdown")


async def reset_dependencies() -> None:
    """Forget all cached instances (for testing)."""
    global _postgres_pool, _http_client, _runner
    global _hit_store, _rule_store, _alias_store
    _postgres_pool = None
    _http_client = None
    _runner = None
    _hit_store = None
    _rule_store = None
    _alias_store = None
