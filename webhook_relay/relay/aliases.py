"""Display-name lookups for LINE ids via the LINE Messaging API."""

import asyncio

import httpx

from webhook_relay.observability.logging import get_logger
from webhook_relay.observability.metrics import ALIASES_RESOLVED
from webhook_relay.relay.line import extract_ids, identifier_kind
from webhook_relay.stores.interface import AliasStore
from webhook_relay.stores.models import Alias

logger = get_logger(__name__)


class LineAliasResolver:
    """Resolve LINE group and user ids to names and store them as aliases.

    Lookup failures (non-2xx, transport errors, unexpected bodies) yield
    no name; nothing is raised to the caller.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        alias_store: AliasStore,
        channel_access_token: str,
        api_base_url: str = "https://api.line.me",
        timeout_seconds: float = 10.0,
    ) -> None:
        self._client = client
        self._aliases = alias_store
        self._token = channel_access_token
        self._base_url = api_base_url.rstrip("/")
        self._timeout = timeout_seconds

    async def _lookup(self, path: str, field: str) -> str | None:
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.get(
                url,
                headers={"Authorization": f"Bearer {self._token}"},
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            logger.warning("line_lookup_failed", path=path, error=str(e))
            return None

        if not response.is_success:
            logger.info("line_lookup_rejected", path=path, status=response.status_code)
            return None
        try:
            data = response.json()
        except ValueError:
            logger.warning("line_lookup_invalid_json", path=path)
            return None
        name = data.get(field) if isinstance(data, dict) else None
        return name if isinstance(name, str) and name else None

    async def group_name(self, group_id: str) -> str | None:
        """Group summary name."""
        return await self._lookup(f"/v2/bot/group/{group_id}/summary", "groupName")

    async def user_name(self, user_id: str, group_id: str | None = None) -> str | None:
        """User display name, via the group member profile when a group is known."""
        if group_id:
            path = f"/v2/bot/group/{group_id}/member/{user_id}"
        else:
            path = f"/v2/bot/profile/{user_id}"
        return await self._lookup(path, "displayName")

    async def resolve_one(self, value: str, group_id: str | None = None) -> Alias | None:
        """Resolve a single id and upsert it as an alias.

        Ids that are neither groups (C…) nor users (U…) are not looked up.

        Returns:
            The stored alias, or None when no name was found
        """
        kind = identifier_kind(value)
        if kind == "group":
            name = await self.group_name(value)
        elif kind == "user":
            name = await self.user_name(value, group_id)
        else:
            name = None

        if name is None:
            return None

        alias = await self._aliases.upsert(value, name)
        ALIASES_RESOLVED.labels(kind=kind).inc()
        logger.info("alias_resolved", value=value, kind=kind)
        return alias

    async def auto_alias(self, body: str) -> list[Alias]:
        """Create aliases for every unaliased id referenced by a webhook body.

        Lookups run concurrently; ids that already have an alias are skipped.
        """
        group_ids, users = extract_ids(body)
        if not group_ids and not users:
            return []

        known = await self._aliases.label_map()
        pending_groups = [gid for gid in group_ids if gid not in known]
        pending_users = [(uid, gid) for uid, gid in users.items() if uid not in known]
        if not pending_groups and not pending_users:
            return []

        values = pending_groups + [uid for uid, _ in pending_users]
        names = await asyncio.gather(
            *(self.group_name(gid) for gid in pending_groups),
            *(self.user_name(uid, gid or None) for uid, gid in pending_users),
        )

        created = []
        for value, name in zip(values, names):
            if name is None:
                continue
            created.append(await self._aliases.upsert(value, name))
            ALIASES_RESOLVED.labels(kind=identifier_kind(value)).inc()

        logger.info(
            "auto_alias_completed",
            looked_up=len(values),
            created=len(created),
        )
        return created
