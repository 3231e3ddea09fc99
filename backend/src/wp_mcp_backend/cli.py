"""Operator CLI for the WP Engine MCP server.

Usage:
    wp-mcp serve --port 8080
    wp-mcp show-token
    wp-mcp rotate-token
    wp-mcp set-search-credentials --url https://search.example.com/graphql --token TOKEN
    wp-mcp tools
"""

from __future__ import annotations

import argparse
import sys

import structlog

from .config import Settings, load_settings
from .credentials import CredentialStore, CredentialStoreError


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        args: Optional list of arguments (uses sys.argv if None)

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="wp-mcp",
        description="Run and configure the WP Engine MCP server",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", type=str, help="Bind address (default: BACKEND_HOST)")
    serve.add_argument("--port", type=int, help="Bind port (default: BACKEND_PORT)")

    subparsers.add_parser("show-token", help="Print the access token and endpoint path")
    subparsers.add_parser("rotate-token", help="Generate and store a new access token")

    search = subparsers.add_parser(
        "set-search-credentials",
        help="Store the Smart Search AI endpoint and bearer token",
    )
    search.add_argument("--url", required=True, help="Smart Search AI GraphQL endpoint")
    search.add_argument("--token", required=True, help="Smart Search AI bearer token")

    subparsers.add_parser("tools", help="List the MCP tool catalog")

    return parser.parse_args(args)


def endpoint_path(settings: Settings) -> str:
    return f"/{settings.mcp_namespace}/mcp"


def _serve(settings: Settings, args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run(
        "wp_mcp_backend.main:create_app",
        factory=True,
        host=args.host or settings.backend_host,
        port=args.port or settings.backend_port,
    )
    return 0


def _show_token(settings: Settings) -> int:
    credentials = CredentialStore.from_settings(settings).load()
    print(f"Endpoint: {endpoint_path(settings)}")
    print(f"Header: X-MCP-Token: {credentials.access_token}")
    print(f"Smart Search AI: {'configured' if credentials.search else 'not configured'}")
    return 0


def _rotate_token(settings: Settings) -> int:
    store = CredentialStore.from_settings(settings)
    token = store.rotate_access_token()
    print(f"New access token: {token}")
    if settings.mcp_access_token:
        print(
            "Warning: MCP_ACCESS_TOKEN is set and overrides the stored token.",
            file=sys.stderr,
        )
    return 0


def _set_search_credentials(settings: Settings, args: argparse.Namespace) -> int:
    if not args.url.strip() or not args.token.strip():
        print("Error: --url and --token must not be empty", file=sys.stderr)
        return 1
    CredentialStore.from_settings(settings).save_search_credentials(args.url, args.token)
    print("Smart Search AI credentials saved. Restart the server to apply them.")
    return 0


def _list_tools(settings: Settings) -> int:
    from .main import build_mcp_server, create_content_backend
    from .search import SmartSearchClient

    server = build_mcp_server(settings, create_content_backend(settings), SmartSearchClient(None))
    for category, names in server.registry.get_tools_by_category().items():
        print(f"[{category}]")
        for name in names:
            tool = server.registry.get_tool(name)
            description = tool.description if tool else ""
            print(f"  {name} - {description}")
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point.

    Args:
        args: Optional list of arguments (uses sys.argv if None)

    Returns:
        Exit code
    """
    parsed = parse_args(args)

    try:
        settings = load_settings()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        if parsed.command == "serve":
            return _serve(settings, parsed)
        if parsed.command == "show-token":
            return _show_token(settings)
        if parsed.command == "rotate-token":
            return _rotate_token(settings)
        if parsed.command == "set-search-credentials":
            return _set_search_credentials(settings, parsed)
        return _list_tools(settings)
    except CredentialStoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def configure_logging() -> None:
    """Send log output to stderr so command output stays clean."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )


def run() -> None:
    """Console script entry point."""
    configure_logging()
    sys.exit(main())


if __name__ == "__main__":
    run()
