"""MCP tool definitions advertised by tools/list."""

from typing import Any

_DATE_PROPERTY = {
    "type": "string",
    "description": 'Date filter: "today" or "YYYY-MM-DD" (default: today)',
}

_NO_ARGS: dict[str, Any] = {"type": "object", "properties": {}}

TOOLS: list[dict[str, Any]] = [
    {
        "name": "webhook_stats",
        "description": (
            "Get webhook relay dashboard stats: total requests, avg response time, "
            "recent hits, storage usage"
        ),
        "inputSchema": _NO_ARGS,
    },
    {
        "name": "webhook_hits",
        "description": (
            "Query webhook hits by date and/or endpoint. Date is in GMT+7. "
            "Use group param to filter by LINE groupId."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "date": _DATE_PROPERTY,
                "endpoint": {"type": "string", "description": "Filter by endpoint name"},
                "group": {
                    "type": "string",
                    "description": "Filter by LINE groupId of the first event",
                },
            },
        },
    },
    {
        "name": "list_forward_rules",
        "description": "List all forwarding rules (endpoint to URL mappings with enabled/persist flags)",
        "inputSchema": _NO_ARGS,
    },
    {
        "name": "set_forward_rule",
        "description": "Create or update a forwarding rule for an endpoint",
        "inputSchema": {
            "type": "object",
            "properties": {
                "endpoint": {"type": "string", "description": "Endpoint name"},
                "forward_url": {"type": "string", "description": "URL to forward webhooks to"},
                "enabled": {"type": "boolean", "description": "Enable forwarding (default: true)"},
                "persist": {"type": "boolean", "description": "Save hits (default: true)"},
            },
            "required": ["endpoint", "forward_url"],
        },
    },
    {
        "name": "delete_forward_rule",
        "description": "Delete a forwarding rule for an endpoint",
        "inputSchema": {
            "type": "object",
            "properties": {
                "endpoint": {"type": "string", "description": "Endpoint name to delete rule for"},
            },
            "required": ["endpoint"],
        },
    },
    {
        "name": "list_aliases",
        "description": (
            "List all value aliases with activity data. Filter by type (group/user) "
            "or find unaliased IDs from recent webhook hits."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "type": {
                    "type": "string",
                    "enum": ["group", "user", "all"],
                    "description": (
                        'Filter by type: "group" (C-prefix), "user" (U-prefix), '
                        'or "all" (default: all)'
                    ),
                },
                "unaliased": {
                    "type": "boolean",
                    "description": "If true, return only IDs found in recent hits that have NO alias",
                },
            },
        },
    },
    {
        "name": "set_alias",
        "description": "Create or update an alias label for a webhook field value",
        "inputSchema": {
            "type": "object",
            "properties": {
                "value": {"type": "string", "description": "The raw value to alias"},
                "label": {"type": "string", "description": "Human-readable label"},
            },
            "required": ["value", "label"],
        },
    },
    {
        "name": "delete_alias",
        "description": "Delete an alias by its ID",
        "inputSchema": {
            "type": "object",
            "properties": {"id": {"type": "number", "description": "Alias ID to delete"}},
            "required": ["id"],
        },
    },
    {
        "name": "purge_old_hits",
        "description": "Delete webhook hits older than the retention period (7 days)",
        "inputSchema": _NO_ARGS,
    },
    {
        "name": "generate_webhook_url",
        "description": "Generate a signed webhook URL for an endpoint",
        "inputSchema": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Endpoint ID to generate URL for"},
            },
            "required": ["id"],
        },
    },
    {
        "name": "line_groups",
        "description": (
            "List active LINE groups for a date with message counts and member names. "
            "Use this first to see which groups are active, then query line_digest "
            "per group for full detail."
        ),
        "inputSchema": {"type": "object", "properties": {"date": _DATE_PROPERTY}},
    },
    {
        "name": "line_digest",
        "description": (
            "Parse LINE webhook hits into a readable digest with full message text. "
            "Resolves IDs via aliases. Always filter by group for best results."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "date": _DATE_PROPERTY,
                "endpoint": {
                    "type": "string",
                    "description": "LINE endpoint name (default: line)",
                },
                "group": {
                    "type": "string",
                    "description": "Filter by group alias name or groupId (one group at a time)",
                },
            },
        },
    },
]

TOOL_NAMES = frozenset(tool["name"] for tool in TOOLS)
