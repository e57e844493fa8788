"""Readers for LINE Messaging API webhook payloads stored as hits.

Every function here tolerates malformed bodies: a hit whose body is not
a JSON object with an ``events`` list contributes nothing.
"""

import json
from collections.abc import Iterable
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from webhook_relay.relay.dates import local_hhmm
from webhook_relay.stores.models import Alias, Hit

IdentifierKind = Literal["group", "user", "other"]

GROUP_PREFIX = "C"
USER_PREFIX = "U"


def parse_events(body: str | None) -> list[dict[str, Any]]:
    """Events of a LINE webhook body, or [] when the body is not one."""
    if not body:
        return []
    try:
        parsed = json.loads(body)
    except ValueError:
        return []
    if not isinstance(parsed, dict):
        return []
    events = parsed.get("events")
    if not isinstance(events, list):
        return []
    return [ev for ev in events if isinstance(ev, dict)]


def _source(event: dict[str, Any]) -> dict[str, Any]:
    source = event.get("source")
    return source if isinstance(source, dict) else {}


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def identifier_kind(value: str) -> IdentifierKind:
    """Classify a LINE id by prefix: C… groups, U… users."""
    if value.startswith(GROUP_PREFIX):
        return "group"
    if value.startswith(USER_PREFIX):
        return "user"
    return "other"


def first_group_id(body: str | None) -> str | None:
    """groupId of the first event, if any."""
    events = parse_events(body)
    if not events:
        return None
    return _str(_source(events[0]).get("groupId")) or None


def extract_ids(body: str | None) -> tuple[list[str], dict[str, str]]:
    """Group ids and user ids referenced by a webhook body.

    Returns:
        (group_ids, users) where users maps each user id to the group it
        was last seen in, or "" when seen outside a group
    """
    group_ids: dict[str, None] = {}
    users: dict[str, str] = {}
    for event in parse_events(body):
        source = _source(event)
        group_id = _str(source.get("groupId"))
        user_id = _str(source.get("userId"))
        if group_id:
            group_ids[group_id] = None
            if user_id:
                users[user_id] = group_id
        elif user_id:
            users[user_id] = ""
    return list(group_ids), users


def human_size(size: Any) -> str:
    """Compact byte size: 512B, 12KB, 3.4MB; '?' when unknown."""
    if not isinstance(size, (int, float)) or not size:
        return "?"
    if size < 1024:
        return f"{size}B"
    if size < 1024 * 1024:
        return f"{size / 1024:.0f}KB"
    return f"{size / (1024 * 1024):.1f}MB"


def render_message(event: dict[str, Any]) -> str:
    """One-line text for an event's message."""
    message = event.get("message")
    if not isinstance(message, dict):
        message = {}
    kind = message.get("type")

    if kind == "text":
        return _str(message.get("text"))
    if kind == "file":
        return f"[FILE] {message.get('fileName') or 'unknown'} ({human_size(message.get('fileSize'))})"
    if kind == "image":
        image_set = message.get("imageSet")
        if isinstance(image_set, dict):
            return f"[IMAGE {image_set.get('index')}/{image_set.get('total')}]"
        return "[IMAGE]"
    if kind == "sticker":
        keywords = message.get("keywords")
        words = ", ".join(map(str, keywords[:2])) if isinstance(keywords, list) else ""
        return f"[STICKER: {words}]" if words else "[STICKER]"
    if kind == "video":
        return "[VIDEO]"
    if kind == "audio":
        return "[AUDIO]"
    if kind == "location":
        return f"[LOCATION] {_str(message.get('title'))}"
    if kind:
        return f"[{kind}]"
    return f"[{event.get('type') or 'unknown'}]"


def _label(value: str, aliases: dict[str, str], tail: int) -> str:
    """Alias label, else the last `tail` characters, else '-'."""
    if value in aliases:
        return aliases[value]
    return value[-tail:] or "-"


class DigestRow(BaseModel):
    """One LINE message rendered for reading."""

    time: str
    group: str
    sender: str = Field(serialization_alias="from")
    type: str
    text: str


def digest(
    hits: Iterable[Hit],
    aliases: dict[str, str],
    offset_hours: int,
) -> list[DigestRow]:
    """Flatten hits into message rows, in the order given."""
    rows: list[DigestRow] = []
    for hit in hits:
        for event in parse_events(hit.body):
            source = _source(event)
            message = event.get("message")
            message_type = message.get("type") if isinstance(message, dict) else None
            group_id = _str(source.get("groupId")) or _str(source.get("roomId"))
            rows.append(
                DigestRow(
                    time=local_hhmm(hit.received_at, offset_hours),
                    group=_label(group_id, aliases, 6),
                    sender=_label(_str(source.get("userId")), aliases, 6),
                    type=message_type or event.get("type") or "?",
                    text=render_message(event),
                )
            )
    return rows


def filter_rows_by_group(rows: list[DigestRow], needle: str) -> list[DigestRow]:
    """Rows whose group label contains needle, case-insensitively."""
    lowered = needle.lower()
    return [row for row in rows if lowered in row.group.lower()]


class ActiveUser(BaseModel):
    name: str
    aliased: bool


class GroupActivity(BaseModel):
    """Message counts and participants of one LINE group."""

    groupId: str
    groupName: str
    aliased: bool
    messages: int
    activeUsers: list[ActiveUser]
    lastMessage: str


def group_activity(hits: Iterable[Hit], aliases: dict[str, str]) -> list[GroupActivity]:
    """Aggregate hits per group, busiest first.

    lastMessage is the first text message encountered, so with hits
    ordered newest-first it is the most recent one.
    """
    counts: dict[str, int] = {}
    members: dict[str, dict[str, None]] = {}
    last_text: dict[str, str] = {}

    for hit in hits:
        for event in parse_events(hit.body):
            source = _source(event)
            group_id = _str(source.get("groupId"))
            if not group_id:
                continue
            counts[group_id] = counts.get(group_id, 0) + 1
            users = members.setdefault(group_id, {})
            user_id = _str(source.get("userId"))
            if user_id:
                users[user_id] = None
            message = event.get("message")
            if (
                not last_text.get(group_id)
                and isinstance(message, dict)
                and message.get("type") == "text"
                and _str(message.get("text"))
            ):
                last_text[group_id] = message["text"][:60]

    result = [
        GroupActivity(
            groupId=group_id,
            groupName=aliases.get(group_id, group_id),
            aliased=group_id in aliases,
            messages=count,
            activeUsers=[
                ActiveUser(name=aliases.get(uid, uid[-6:]), aliased=uid in aliases)
                for uid in members[group_id]
            ],
            lastMessage=last_text.get(group_id, ""),
        )
        for group_id, count in counts.items()
    ]
    result.sort(key=lambda g: g.messages, reverse=True)
    return result


class IdentifierActivity(BaseModel):
    """How often an id appeared in recent hits, and where."""

    count: int = 0
    last_seen: datetime
    groups: list[str] = Field(default_factory=list)

    def touch(self, received_at: datetime, group_label: str | None) -> None:
        self.count += 1
        if received_at > self.last_seen:
            self.last_seen = received_at
        if group_label and group_label not in self.groups:
            self.groups.append(group_label)


def identifier_activity(
    hits: Iterable[Hit],
    aliases: dict[str, str],
    group_label_chars: int = 8,
) -> dict[str, IdentifierActivity]:
    """Count group and user id occurrences across hits.

    Users additionally collect the label of each group they were seen
    in (alias, or the last group_label_chars characters of the id).
    """
    activity: dict[str, IdentifierActivity] = {}

    def track(value: str, received_at: datetime, group_label: str | None) -> None:
        entry = activity.get(value)
        if entry is None:
            entry = activity[value] = IdentifierActivity(last_seen=received_at)
        entry.touch(received_at, group_label)

    for hit in hits:
        for event in parse_events(hit.body):
            source = _source(event)
            group_id = _str(source.get("groupId"))
            user_id = _str(source.get("userId"))
            if group_id:
                track(group_id, hit.received_at, None)
            if user_id:
                label = aliases.get(group_id, group_id[-group_label_chars:]) if group_id else None
                track(user_id, hit.received_at, label)
    return activity


class UnknownIdentifier(BaseModel):
    """An id seen in payloads that has no alias yet."""

    id: str
    type: IdentifierKind
    count: int
    last_seen: datetime
    seen_in_groups: list[str]


def unknown_identifiers(
    activity: dict[str, IdentifierActivity],
    aliases: dict[str, str],
    kind: IdentifierKind | Literal["all"] = "all",
) -> list[UnknownIdentifier]:
    """Unaliased ids, most frequent first."""
    result = [
        UnknownIdentifier(
            id=value,
            type=identifier_kind(value),
            count=entry.count,
            last_seen=entry.last_seen,
            seen_in_groups=list(entry.groups),
        )
        for value, entry in activity.items()
        if value not in aliases
    ]
    if kind != "all":
        result = [item for item in result if item.type == kind]
    result.sort(key=lambda item: item.count, reverse=True)
    return result


class AliasActivity(BaseModel):
    """Alias row enriched with recent activity."""

    id: int
    value: str
    label: str
    created_at: datetime
    last_seen: datetime | None = None
    message_count: int = 0
    seen_in_groups: list[str] = Field(default_factory=list)


def alias_activity(
    aliases: Iterable[Alias],
    activity: dict[str, IdentifierActivity],
    kind: IdentifierKind | Literal["all"] = "all",
) -> list[AliasActivity]:
    """Aliases with last_seen, message_count and seen_in_groups filled in."""
    result = []
    for alias in aliases:
        if kind in ("group", "user") and identifier_kind(alias.value) != kind:
            continue
        entry = activity.get(alias.value)
        result.append(
            AliasActivity(
                **alias.model_dump(),
                last_seen=entry.last_seen if entry else None,
                message_count=entry.count if entry else 0,
                seen_in_groups=list(entry.groups) if entry else [],
            )
        )
    return result
