"""MCP (JSON-RPC 2.0 tool calling) surface."""

from webhook_relay.api.mcp.server import MCPToolServer
from webhook_relay.api.mcp.tools import TOOLS

__all__ = ["MCPToolServer", "TOOLS"]
