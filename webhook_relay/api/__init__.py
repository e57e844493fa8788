"""HTTP API: webhook receive routes, management API and MCP endpoint."""
