"""Read and management operations shared by the REST API and MCP tools."""

from datetime import datetime, timedelta
from typing import Any, Literal
from urllib.parse import urlsplit

from pydantic import BaseModel, Field

from webhook_relay import __version__
from webhook_relay.config.models.relay import RelayConfig
from webhook_relay.observability.logging import get_logger
from webhook_relay.observability.metrics import HITS_PURGED
from webhook_relay.relay import line
from webhook_relay.relay.dates import TODAY, resolve_window
from webhook_relay.relay.errors import InvalidForwardURLError
from webhook_relay.stores.interface import AliasStore, ForwardRuleStore, HitStore
from webhook_relay.stores.models import Alias, ForwardRule, Hit, utc_now

logger = get_logger(__name__)


class HitPage(BaseModel):
    """Hits for one local calendar day."""

    date: str
    from_: datetime = Field(serialization_alias="from")
    to: datetime
    count: int
    hits: list[Hit]

    def to_response(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class StorageUsage(BaseModel):
    db_size_bytes: int | None
    writes_today: int


class Stats(BaseModel):
    """Dashboard summary."""

    total_requests: int
    avg_response_ms: int
    oldest_hit_at: datetime | None
    recent: list[Hit]
    forward_rules: list[ForwardRule]
    aliases: list[Alias]
    storage: StorageUsage
    started_at: datetime
    uptime_ms: int
    version: str


def validate_forward_url(url: str | None) -> str:
    """Require an absolute http(s) URL.

    Raises:
        InvalidForwardURLError: If url is missing or not absolute
    """
    if not url:
        raise InvalidForwardURLError("Missing forward_url")
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise InvalidForwardURLError("Invalid forward_url")
    return url


class RelayService:
    """Query, aggregation and CRUD over the relay stores."""

    def __init__(
        self,
        *,
        hit_store: HitStore,
        rule_store: ForwardRuleStore,
        alias_store: AliasStore,
        config: RelayConfig,
        started_at: datetime | None = None,
    ) -> None:
        self.hits = hit_store
        self.rules = rule_store
        self.aliases = alias_store
        self.config = config
        self.started_at = started_at or utc_now()

    # Hits

    async def hits_for_day(
        self,
        date: str | None = None,
        endpoint: str | None = None,
        group: str | None = None,
    ) -> HitPage:
        """Hits within one UTC+offset calendar day, newest first.

        Args:
            date: "today" (default) or YYYY-MM-DD
            endpoint: Only hits for this endpoint
            group: Only hits whose first LINE event is in this groupId

        Raises:
            InvalidDateError: If date is malformed
        """
        start, end = resolve_window(date, self.config.timezone_offset_hours)
        hits = await self.hits.query(
            start=start,
            end=end,
            endpoint=endpoint or None,
            limit=self.config.page_size,
        )
        if group:
            hits = [hit for hit in hits if line.first_group_id(hit.body) == group]
        return HitPage(
            date=date or TODAY,
            from_=start,
            to=end,
            count=len(hits),
            hits=hits,
        )

    async def purge(self, now: datetime | None = None) -> int:
        """Delete hits older than the retention period; return the count."""
        cutoff = (now or utc_now()) - timedelta(days=self.config.retention_days)
        deleted = await self.hits.purge_before(cutoff)
        HITS_PURGED.inc(deleted)
        logger.info("hits_purged", deleted=deleted, cutoff=cutoff.isoformat())
        return deleted

    # Forward rules

    async def set_forward_rule(
        self,
        endpoint: str,
        forward_url: str | None,
        *,
        enabled: bool | None = None,
        persist: bool | None = None,
    ) -> ForwardRule:
        """Validate and upsert a forward rule; flags default to true."""
        url = validate_forward_url(forward_url)
        rule = await self.rules.upsert(
            endpoint,
            url,
            enabled=True if enabled is None else enabled,
            persist=True if persist is None else persist,
        )
        logger.info(
            "forward_rule_set",
            endpoint=endpoint,
            enabled=rule.enabled,
            persist=rule.persist,
        )
        return rule

    async def delete_forward_rule(self, endpoint: str) -> bool:
        deleted = await self.rules.delete(endpoint)
        logger.info("forward_rule_deleted", endpoint=endpoint, existed=deleted)
        return deleted

    # Aliases and LINE activity

    async def _recent_line_hits(self, now: datetime | None = None) -> list[Hit]:
        since = (now or utc_now()) - timedelta(days=self.config.unknown_scan_days)
        return await self.hits.query(
            start=since,
            endpoint=self.config.line_endpoint,
            limit=self.config.unknown_scan_limit,
        )

    async def unknown_identifiers(
        self,
        kind: line.IdentifierKind | Literal["all"] = "all",
        group_label_chars: int = 8,
        now: datetime | None = None,
    ) -> list[line.UnknownIdentifier]:
        """Ids seen in recent LINE hits that have no alias, most frequent first."""
        hits = await self._recent_line_hits(now)
        aliases = await self.aliases.label_map()
        activity = line.identifier_activity(hits, aliases, group_label_chars)
        return line.unknown_identifiers(activity, aliases, kind)

    async def aliases_with_activity(
        self,
        kind: line.IdentifierKind | Literal["all"] = "all",
        now: datetime | None = None,
    ) -> list[line.AliasActivity]:
        """Every alias enriched with recent LINE activity."""
        hits = await self._recent_line_hits(now)
        all_aliases = await self.aliases.list_all()
        labels = {alias.value: alias.label for alias in all_aliases}
        activity = line.identifier_activity(hits, labels, group_label_chars=6)
        return line.alias_activity(all_aliases, activity, kind)

    async def line_groups(self, date: str | None = None) -> list[line.GroupActivity]:
        """Active LINE groups for a day, busiest first."""
        start, end = resolve_window(date, self.config.timezone_offset_hours)
        hits = await self.hits.query(
            start=start,
            end=end,
            endpoint=self.config.line_endpoint,
            limit=self.config.page_size,
        )
        return line.group_activity(hits, await self.aliases.label_map())

    async def line_digest(
        self,
        date: str | None = None,
        endpoint: str | None = None,
        group: str | None = None,
    ) -> list[line.DigestRow]:
        """LINE messages for a day in chronological order.

        Args:
            date: "today" (default) or YYYY-MM-DD
            endpoint: LINE endpoint name (defaults to the configured one)
            group: Case-insensitive substring of the group label or id
        """
        start, end = resolve_window(date, self.config.timezone_offset_hours)
        hits = await self.hits.query(
            start=start,
            end=end,
            endpoint=endpoint or self.config.line_endpoint,
            limit=self.config.page_size,
            newest_first=False,
        )
        rows = line.digest(
            hits,
            await self.aliases.label_map(),
            self.config.timezone_offset_hours,
        )
        if group:
            rows = line.filter_rows_by_group(rows, group)
        return rows

    # Stats and URLs

    async def stats(self, now: datetime | None = None) -> Stats:
        now = now or utc_now()
        utc_midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        totals = await self.hits.totals()
        return Stats(
            total_requests=totals.total_requests,
            avg_response_ms=round(totals.avg_response_ms),
            oldest_hit_at=await self.hits.oldest_received_at(),
            recent=await self.hits.query(limit=self.config.recent_limit),
            forward_rules=await self.rules.list_all(),
            aliases=await self.aliases.list_all(),
            storage=StorageUsage(
                db_size_bytes=await self.hits.storage_size_bytes(),
                writes_today=await self.hits.count_since(utc_midnight),
            ),
            started_at=self.started_at,
            uptime_ms=round((now - self.started_at).total_seconds() * 1000),
            version=__version__,
        )

