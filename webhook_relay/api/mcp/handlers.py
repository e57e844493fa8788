"""HTTP transport for the MCP endpoint (POST/GET/DELETE /mcp)."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from webhook_relay.api.dependencies import ServiceDep, SettingsDep
from webhook_relay.api.mcp.server import PARSE_ERROR, MCPToolServer, rpc_error, server_info
from webhook_relay.api.middleware.auth import require_session

router = APIRouter(prefix="/mcp", tags=["MCP"])


def get_mcp_server(
    request: Request,
    service: ServiceDep,
    settings: SettingsDep,
) -> MCPToolServer:
    """MCP server bound to the current request's origin."""
    base_url = settings.api.public_base_url or str(request.base_url)
    return MCPToolServer(service, secret=settings.auth.api_token, base_url=base_url)


MCPServerDep = Annotated[MCPToolServer, Depends(get_mcp_server)]


@router.get("")
async def describe() -> dict[str, Any]:
    """Server name, version and capabilities."""
    return {"jsonrpc": "2.0", "result": server_info()}


@router.delete("")
async def close_session() -> Response:
    """Sessions are stateless; nothing to tear down."""
    return Response(status_code=200)


@router.post("", dependencies=[Depends(require_session)])
async def rpc(request: Request, server: MCPServerDep) -> Response:
    """Handle one JSON-RPC 2.0 message."""
    try:
        message = await request.json()
    except ValueError:
        return JSONResponse(rpc_error(None, PARSE_ERROR, "Parse error"))

    reply = await server.handle(message)
    if reply is None:
        return Response(status_code=204)
    return JSONResponse(reply)
