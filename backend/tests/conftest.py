"""pytest fixtures for WP Engine MCP backend tests."""

import os

# Set environment variables BEFORE any imports
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("CONTENT_BACKEND", "memory")

import json
from typing import Any, Callable

import httpx
import pytest

from wp_mcp_backend.config import Settings
from wp_mcp_backend.content import InMemoryContentBackend, SiteInfo
from wp_mcp_backend.search import SearchBackendCredential, SmartSearchClient

TEST_ACCESS_TOKEN = "test-access-token-0123456789abcd"
SEARCH_ENDPOINT = "https://search.example.com/graphql"


@pytest.fixture
def site_info() -> SiteInfo:
    """Provide sample site metadata."""
    return SiteInfo(
        name="Test Site",
        url="https://test.example.com",
        description="A site for tests",
        version="6.4.2",
        admin_email="admin@test.example.com",
    )


@pytest.fixture
def memory_backend(site_info) -> InMemoryContentBackend:
    """Provide an empty in-memory content backend."""
    return InMemoryContentBackend(site_info)


@pytest.fixture
def search_credential() -> SearchBackendCredential:
    """Provide Smart Search AI credentials."""
    return SearchBackendCredential(endpoint_url=SEARCH_ENDPOINT, bearer_token="search-token")


@pytest.fixture
def make_search_client(search_credential) -> Callable[..., SmartSearchClient]:
    """Build a search client whose HTTP traffic goes to a handler.

    The handler receives the ``httpx.Request`` and returns an
    ``httpx.Response``. Sent requests are recorded on ``client.sent``.
    """

    def factory(
        handler: Callable[[httpx.Request], httpx.Response],
        credential: Any = search_credential,
    ) -> SmartSearchClient:
        sent: list[dict[str, Any]] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            sent.append(
                {
                    "url": str(request.url),
                    "headers": dict(request.headers),
                    "body": json.loads(request.content),
                }
            )
            return handler(request)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
        client = SmartSearchClient(credential, http_client=http_client)
        client.sent = sent  # type: ignore[attr-defined]
        return client

    return factory


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Provide settings pointing at a temporary credential file."""
    return Settings(
        app_env="test",
        backend_host="127.0.0.1",
        backend_port=8000,
        request_max_bytes=1048576,
        mcp_namespace="wpengine/v1",
        mcp_tool_prefix="wpengine--",
        mcp_server_name="WP Engine MCP Server",
        mcp_server_version="2.0.0",
        mcp_tool_timeout_seconds=60.0,
        mcp_credentials_path=str(tmp_path / "credentials.json"),
        mcp_access_token=TEST_ACCESS_TOKEN,
        smart_search_url=None,
        smart_search_token=None,
        smart_search_timeout_seconds=30.0,
        content_backend="memory",
        wordpress_url=None,
        wordpress_user=None,
        wordpress_app_password=None,
        site_name="Test Site",
        site_url="https://test.example.com",
        site_description="A site for tests",
        site_admin_email="admin@test.example.com",
        site_wordpress_version="6.4.2",
    )
