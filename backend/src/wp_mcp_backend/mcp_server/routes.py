"""MCP Server HTTP routes for FastAPI.

Provides the single JSON-RPC endpoint for MCP protocol access. The
access token is checked first; the body size limit applies only to
authenticated requests.
"""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse

from ..core.errors import (
    InvalidContentLengthError,
    RequestTooLargeError,
    ServiceNotReadyError,
)
from .auth import MCP_TOKEN_HEADER, MCPAuthenticator, MCPAuthError
from .server import MCPServer

logger = structlog.get_logger(__name__)

AUTH_ERROR_CODE = "rest_forbidden"


def get_mcp_server(request: Request) -> MCPServer:
    """Get MCP server from app state."""
    server = getattr(request.app.state, "mcp_server", None)
    if server is None:
        raise ServiceNotReadyError()
    return server


def get_authenticator(request: Request) -> MCPAuthenticator:
    """Get the request authenticator from app state."""
    authenticator = getattr(request.app.state, "mcp_authenticator", None)
    if authenticator is None:
        raise ServiceNotReadyError()
    return authenticator


async def require_mcp_token(
    authenticator: MCPAuthenticator = Depends(get_authenticator),
    x_mcp_token: Optional[str] = Header(None, alias=MCP_TOKEN_HEADER),
) -> None:
    """Reject the request unless it carries the configured access token."""
    authenticator.authenticate(x_mcp_token)


def max_request_bytes(request: Request) -> int:
    return request.app.state.settings.request_max_bytes


async def enforce_request_size(request: Request) -> None:
    """Reject a declared body larger than ``REQUEST_MAX_BYTES``."""
    content_length = request.headers.get("content-length")
    if not content_length:
        return
    try:
        declared = int(content_length)
    except ValueError:
        raise InvalidContentLengthError() from None
    limit = max_request_bytes(request)
    if declared > limit:
        raise RequestTooLargeError(limit)


async def mcp_auth_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render an authentication failure in the host's REST error shape."""
    if not isinstance(exc, MCPAuthError):
        raise exc
    logger.info("mcp_auth_denied", reason=exc.reason.value, path=request.url.path)
    return JSONResponse(
        status_code=401,
        content={
            "code": AUTH_ERROR_CODE,
            "message": exc.message,
            "data": {"status": 401},
        },
    )


def create_mcp_router(namespace: str) -> APIRouter:
    """Build the router serving ``POST /<namespace>/mcp``.

    Args:
        namespace: Route prefix, e.g. ``wpengine/v1``
    """
    router = APIRouter(prefix=f"/{namespace.strip('/')}", tags=["mcp-server"])

    # Dependencies run in order: auth before size.
    @router.post(
        "/mcp",
        dependencies=[Depends(require_mcp_token), Depends(enforce_request_size)],
    )
    async def jsonrpc_endpoint(
        request: Request,
        server: MCPServer = Depends(get_mcp_server),
    ) -> JSONResponse:
        """JSON-RPC 2.0 endpoint for MCP protocol."""
        body = await request.body()
        limit = max_request_bytes(request)
        if len(body) > limit:
            raise RequestTooLargeError(limit)
        response = await server.dispatch(body)
        return JSONResponse(content=response.to_dict())

    return router
