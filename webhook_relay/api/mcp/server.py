"""JSON-RPC 2.0 dispatcher for the MCP tool surface.

Implements initialize, notifications/initialized, ping, tools/list and
tools/call. Tool failures are reported inside the result with
``isError: true``; protocol failures use JSON-RPC error objects.
"""

import json
from typing import Any

from pydantic_core import to_jsonable_python

from webhook_relay.api.mcp.tools import TOOL_NAMES, TOOLS
from webhook_relay.db.errors import StoreError
from webhook_relay.observability.logging import get_logger
from webhook_relay.relay import tokens
from webhook_relay.relay.errors import RelayError
from webhook_relay.relay.line import UnknownIdentifier
from webhook_relay.relay.service import RelayService

logger = get_logger(__name__)

PROTOCOL_VERSION = "2025-03-26"
SERVER_INFO = {"name": "webhook-relay", "version": "1.0.0"}

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601


class ToolError(Exception):
    """Bad or missing tool arguments."""


def _text(data: Any, indent: int | None = 2) -> dict[str, Any]:
    payload = json.dumps(to_jsonable_python(data), indent=indent, ensure_ascii=False)
    return {"content": [{"type": "text", "text": payload}]}


def _unaliased_row(item: UnknownIdentifier) -> dict[str, Any]:
    # Only the recent window is scanned, so first_seen mirrors last_seen.
    return {
        "id": item.id,
        "type": item.type,
        "first_seen": item.last_seen,
        "last_seen": item.last_seen,
        "message_count": item.count,
        "seen_in_groups": item.seen_in_groups,
    }


def _error(message: str) -> dict[str, Any]:
    return {"content": [{"type": "text", "text": message}], "isError": True}


def _require_str(args: dict[str, Any], name: str) -> str:
    value = args.get(name)
    if not isinstance(value, str) or not value:
        raise ToolError(f"Missing {name}")
    return value


def _optional_str(args: dict[str, Any], name: str) -> str | None:
    value = args.get(name)
    return value if isinstance(value, str) and value else None


def _optional_bool(args: dict[str, Any], name: str) -> bool | None:
    value = args.get(name)
    return value if isinstance(value, bool) else None


def rpc_result(request_id: Any, result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def rpc_error(request_id: Any, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}


def server_info() -> dict[str, Any]:
    """Server description returned by GET /mcp and initialize."""
    return {
        **SERVER_INFO,
        "protocolVersion": PROTOCOL_VERSION,
        "capabilities": {"tools": {}},
    }


class MCPToolServer:
    """Serves the relay's tools over JSON-RPC."""

    def __init__(
        self,
        service: RelayService,
        *,
        secret: str | None,
        base_url: str,
    ) -> None:
        """Initialize server.

        Args:
            service: Query and management service
            secret: Shared secret for signing URLs; None disables URL generation
            base_url: Origin used in generated webhook URLs
        """
        self._service = service
        self._secret = secret
        self._base_url = base_url

    async def handle(self, message: Any) -> dict[str, Any] | None:
        """Dispatch one JSON-RPC message.

        Returns:
            The response object, or None for notifications
        """
        if not isinstance(message, dict):
            return rpc_error(None, INVALID_REQUEST, "Invalid Request")

        request_id = message.get("id")
        method = message.get("method")
        params = message.get("params")
        if not isinstance(params, dict):
            params = {}

        if method == "initialize":
            return rpc_result(
                request_id,
                {
                    "protocolVersion": PROTOCOL_VERSION,
                    "capabilities": {"tools": {}},
                    "serverInfo": SERVER_INFO,
                },
            )
        if method == "notifications/initialized":
            return None
        if method == "ping":
            return rpc_result(request_id, {})
        if method == "tools/list":
            return rpc_result(request_id, {"tools": TOOLS})
        if method == "tools/call":
            name = params.get("name")
            arguments = params.get("arguments")
            if not isinstance(arguments, dict):
                arguments = {}
            return rpc_result(request_id, await self.call_tool(name, arguments))

        logger.info("mcp_method_not_found", method=method)
        return rpc_error(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")

    async def call_tool(self, name: Any, args: dict[str, Any]) -> dict[str, Any]:
        """Run a tool and wrap its output as MCP text content."""
        if name not in TOOL_NAMES:
            return _error(f"Unknown tool: {name}")
        handler = getattr(self, f"_tool_{name}")

        logger.info("mcp_tool_called", tool=name)
        try:
            return await handler(args)
        except (ToolError, RelayError) as e:
            return _error(f"Error: {e}")
        except StoreError as e:
            logger.error("mcp_tool_store_error", tool=name, error=str(e))
            return _error(f"Error: {e}")
        except Exception as e:
            logger.exception("mcp_tool_failed", tool=name, error=str(e))
            return _error(f"Error: {e}")

    # Tools

    async def _tool_webhook_stats(self, args: dict[str, Any]) -> dict[str, Any]:
        return _text(await self._service.stats())

    async def _tool_webhook_hits(self, args: dict[str, Any]) -> dict[str, Any]:
        date = _optional_str(args, "date")
        page = await self._service.hits_for_day(
            date=date,
            endpoint=_optional_str(args, "endpoint"),
            group=_optional_str(args, "group"),
        )
        return _text({"date": page.date, "count": page.count, "hits": page.hits})

    async def _tool_list_forward_rules(self, args: dict[str, Any]) -> dict[str, Any]:
        return _text(await self._service.rules.list_all())

    async def _tool_set_forward_rule(self, args: dict[str, Any]) -> dict[str, Any]:
        endpoint = _require_str(args, "endpoint")
        await self._service.set_forward_rule(
            endpoint,
            _optional_str(args, "forward_url"),
            enabled=_optional_bool(args, "enabled"),
            persist=_optional_bool(args, "persist"),
        )
        return _text({"ok": True, "endpoint": endpoint}, indent=None)

    async def _tool_delete_forward_rule(self, args: dict[str, Any]) -> dict[str, Any]:
        await self._service.delete_forward_rule(_require_str(args, "endpoint"))
        return _text({"ok": True}, indent=None)

    async def _tool_list_aliases(self, args: dict[str, Any]) -> dict[str, Any]:
        kind = args.get("type") if args.get("type") in ("group", "user") else "all"
        if args.get("unaliased") is True:
            unaliased = await self._service.unknown_identifiers(kind=kind, group_label_chars=6)
            return _text({"unaliased": [_unaliased_row(item) for item in unaliased]})
        return _text(await self._service.aliases_with_activity(kind=kind))

    async def _tool_set_alias(self, args: dict[str, Any]) -> dict[str, Any]:
        alias = await self._service.aliases.upsert(
            _require_str(args, "value"),
            _require_str(args, "label"),
        )
        return _text({"ok": True, "value": alias.value, "label": alias.label}, indent=None)

    async def _tool_delete_alias(self, args: dict[str, Any]) -> dict[str, Any]:
        alias_id = args.get("id")
        if isinstance(alias_id, bool) or not isinstance(alias_id, (int, float)):
            raise ToolError("Missing id")
        await self._service.aliases.delete(int(alias_id))
        return _text({"ok": True}, indent=None)

    async def _tool_purge_old_hits(self, args: dict[str, Any]) -> dict[str, Any]:
        return _text({"deleted": await self._service.purge()}, indent=None)

    async def _tool_generate_webhook_url(self, args: dict[str, Any]) -> dict[str, Any]:
        endpoint = _require_str(args, "id")
        if self._secret is None:
            raise ToolError("No API token configured")
        url = tokens.build_url(self._base_url, endpoint, self._secret)
        return _text({"url": url}, indent=None)

    async def _tool_line_groups(self, args: dict[str, Any]) -> dict[str, Any]:
        date = _optional_str(args, "date")
        groups = await self._service.line_groups(date)
        return _text({"date": date or "today", "groups": groups})

    async def _tool_line_digest(self, args: dict[str, Any]) -> dict[str, Any]:
        date = _optional_str(args, "date")
        endpoint = _optional_str(args, "endpoint") or self._service.config.line_endpoint
        rows = await self._service.line_digest(
            date=date,
            endpoint=endpoint,
            group=_optional_str(args, "group"),
        )
        return _text(
            {
                "date": date or "today",
                "endpoint": endpoint,
                "count": len(rows),
                "messages": [row.model_dump(by_alias=True) for row in rows],
            }
        )
