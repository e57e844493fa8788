"""In-memory implementations of the relay stores."""

from datetime import datetime
from itertools import count

from webhook_relay.stores.interface import AliasStore, ForwardRuleStore, HitStore
from webhook_relay.stores.models import (
    Alias,
    ForwardRule,
    Hit,
    HitTotals,
    NewHit,
    utc_now,
)


class InMemoryHitStore(HitStore):
    """In-memory hit storage for testing and development.

    Uses dict storage with linear scan for queries.
    Not suitable for production use.
    """

    def __init__(self) -> None:
        self._hits: dict[int, Hit] = {}
        self._ids = count(1)

    async def record(self, hit: NewHit) -> int:
        hit_id = next(self._ids)
        self._hits[hit_id] = Hit(id=hit_id, **hit.model_dump())
        return hit_id

    async def get(self, hit_id: int) -> Hit | None:
        return self._hits.get(hit_id)

    async def set_forward_outcome(
        self,
        hit_id: int,
        *,
        status: int,
        forward_ms: int,
        error: str | None,
    ) -> None:
        hit = self._hits.get(hit_id)
        if hit is None:
            return
        self._hits[hit_id] = hit.model_copy(
            update={
                "forward_status": status,
                "forward_ms": forward_ms,
                "forward_error": error,
            }
        )

    async def query(
        self,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
        endpoint: str | None = None,
        limit: int = 500,
        newest_first: bool = True,
    ) -> list[Hit]:
        results = []
        for hit in self._hits.values():
            if start is not None and hit.received_at < start:
                continue
            if end is not None and hit.received_at >= end:
                continue
            if endpoint is not None and hit.endpoint != endpoint:
                continue
            results.append(hit)
        results.sort(key=lambda h: (h.received_at, h.id), reverse=newest_first)
        return results[:limit]

    async def purge_before(self, cutoff: datetime) -> int:
        stale = [hit_id for hit_id, hit in self._hits.items() if hit.received_at < cutoff]
        for hit_id in stale:
            del self._hits[hit_id]
        return len(stale)

    async def totals(self) -> HitTotals:
        if not self._hits:
            return HitTotals()
        total = len(self._hits)
        avg = sum(h.response_ms for h in self._hits.values()) / total
        return HitTotals(total_requests=total, avg_response_ms=avg)

    async def count_since(self, since: datetime) -> int:
        return sum(1 for h in self._hits.values() if h.received_at >= since)

    async def oldest_received_at(self) -> datetime | None:
        if not self._hits:
            return None
        return min(h.received_at for h in self._hits.values())


class InMemoryForwardRuleStore(ForwardRuleStore):
    """In-memory forward rule storage keyed by endpoint."""

    def __init__(self) -> None:
        self._rules: dict[str, ForwardRule] = {}

    async def get(self, endpoint: str) -> ForwardRule | None:
        return self._rules.get(endpoint)

    async def list_all(self) -> list[ForwardRule]:
        return list(self._rules.values())

    async def upsert(
        self,
        endpoint: str,
        forward_url: str,
        *,
        enabled: bool = True,
        persist: bool = True,
    ) -> ForwardRule:
        now = utc_now()
        existing = self._rules.get(endpoint)
        rule = ForwardRule(
            endpoint=endpoint,
            forward_url=forward_url,
            enabled=enabled,
            persist=persist,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        self._rules[endpoint] = rule
        return rule

    async def delete(self, endpoint: str) -> bool:
        return self._rules.pop(endpoint, None) is not None


class InMemoryAliasStore(AliasStore):
    """In-memory alias storage with a unique index on value."""

    def __init__(self) -> None:
        self._by_id: dict[int, Alias] = {}
        self._ids = count(1)

    async def list_all(self) -> list[Alias]:
        return sorted(self._by_id.values(), key=lambda a: a.id)

    async def upsert(self, value: str, label: str) -> Alias:
        for alias_id, alias in self._by_id.items():
            if alias.value == value:
                updated = alias.model_copy(update={"label": label})
                self._by_id[alias_id] = updated
                return updated

        alias = Alias(id=next(self._ids), value=value, label=label)
        self._by_id[alias.id] = alias
        return alias

    async def delete(self, alias_id: int) -> bool:
        return self._by_id.pop(alias_id, None) is not None
