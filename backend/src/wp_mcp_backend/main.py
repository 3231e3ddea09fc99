"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncGenerator, Awaitable, Callable, Optional, cast

from fastapi import APIRouter, FastAPI, Request
from starlette.responses import Response
import structlog

from .config import Settings, get_settings, load_settings
from .content import ContentBackend, InMemoryContentBackend, SiteInfo, WordPressRestBackend
from .core.errors import AppError, app_error_handler
from .credentials import CredentialStore
from .mcp_server import MCPServer, MCPServerRegistry, MCPTokenAuth
from .mcp_server.auth import MCPAuthError
from .mcp_server.routes import create_mcp_router, mcp_auth_error_handler
from .mcp_server.tools import register_post_tools, register_search_tools, register_site_tools
from .search import SmartSearchClient

logger = structlog.get_logger(__name__)


def create_content_backend(settings: Settings) -> ContentBackend:
    """Build the content backend selected by ``CONTENT_BACKEND``."""
    if settings.content_backend == "wordpress":
        return WordPressRestBackend(
            base_url=cast(str, settings.wordpress_url),
            username=cast(str, settings.wordpress_user),
            app_password=cast(str, settings.wordpress_app_password),
        )
    return InMemoryContentBackend(
        SiteInfo(
            name=settings.site_name,
            url=settings.site_url,
            description=settings.site_description,
            version=settings.site_wordpress_version,
            admin_email=settings.site_admin_email,
        )
    )


def site_url_for(settings: Settings) -> str:
    """Public site URL reported as the source of indexed documents."""
    if settings.content_backend == "wordpress" and settings.wordpress_url:
        return settings.wordpress_url.rstrip("/")
    return settings.site_url


def build_mcp_server(
    settings: Settings,
    content_backend: ContentBackend,
    search_client: SmartSearchClient,
) -> MCPServer:
    """Build the MCP server with the full tool catalog.

    Tools are registered in the order clients see them in ``tools/list``.
    """
    registry = MCPServerRegistry(timeout_seconds=settings.mcp_tool_timeout_seconds)
    prefix = settings.mcp_tool_prefix

    register_site_tools(registry, content_backend, prefix)
    register_post_tools(registry, content_backend, prefix)
    register_search_tools(
        registry,
        search_client,
        site_url=site_url_for(settings),
        system_name=settings.mcp_server_name,
        prefix=prefix,
    )

    return MCPServer(
        name=settings.mcp_server_name,
        version=settings.mcp_server_version,
        registry=registry,
    )


def _make_lifespan(
    content_backend: Optional[ContentBackend],
    search_client: Optional[SmartSearchClient],
) -> Callable[[FastAPI], AsyncContextManager[None]]:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        Application lifespan manager.

        Loads the credential snapshot once, builds the backends and the MCP
        server, and stores them in app.state for dependency injection.
        """
        settings: Settings = app.state.settings

        credentials = CredentialStore.from_settings(settings).load()
        app.state.mcp_authenticator = MCPTokenAuth(credentials.access_token)

        backend = content_backend or create_content_backend(settings)
        client = search_client or SmartSearchClient(
            credentials.search,
            timeout=settings.smart_search_timeout_seconds,
        )
        app.state.content_backend = backend
        app.state.search_client = client
        app.state.mcp_server = build_mcp_server(settings, backend, client)

        logger.info(
            "mcp_server_initialized",
            namespace=settings.mcp_namespace,
            tools=len(app.state.mcp_server.registry),
            content_backend=settings.content_backend,
            search_configured=client.configured,
        )

        try:
            yield
        finally:
            await client.close()
            await backend.close()
            app.state.mcp_server = None
            logger.info("mcp_server_shutdown")

    return lifespan


router = APIRouter()


@router.get("/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


def create_app(
    settings: Optional[Settings] = None,
    *,
    content_backend: Optional[ContentBackend] = None,
    search_client: Optional[SmartSearchClient] = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Application settings (loaded from the environment if omitted)
        content_backend: Content store to use instead of the configured one
        search_client: Search client to use instead of one built from credentials
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="WP Engine MCP Server",
        version=settings.mcp_server_version,
        description="MCP endpoint for WordPress content and Smart Search AI indexing",
        lifespan=_make_lifespan(content_backend, search_client),
    )
    app.state.settings = settings

    # Register exception handlers
    app.add_exception_handler(
        AppError,
        cast(Callable[[Request, Exception], Awaitable[Response]], app_error_handler),
    )
    app.add_exception_handler(
        MCPAuthError,
        cast(Callable[[Request, Exception], Awaitable[Response]], mcp_auth_error_handler),
    )

    # Register routers
    app.include_router(router)
    app.include_router(create_mcp_router(settings.mcp_namespace))
    return app


def run() -> None:
    """Run the application with uvicorn."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "wp_mcp_backend.main:create_app",
        factory=True,
        host=settings.backend_host,
        port=settings.backend_port,
    )
