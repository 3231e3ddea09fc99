"""Tests for the MCP HTTP endpoint."""

import json
from dataclasses import replace
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient

from wp_mcp_backend.content import ContentBackend, ContentBackendError, WordPressRestBackend
from wp_mcp_backend.main import create_app

ENDPOINT = "/wpengine/v1/mcp"
AUTH = {"X-MCP-Token": "test-access-token-0123456789abcd"}

ASSET = {
    "public_id": "a",
    "secure_url": "https://x/a.jpg",
    "resource_type": "image",
    "format": "jpg",
}

EXPECTED_TOOLS = [
    ("wpengine--get-current-site-info", None),
    ("wpengine--purge-cache", None),
    ("wpengine--create-post", ["title", "content"]),
    ("wpengine--update-post", ["post_id"]),
    ("wpengine--get-post", ["post_id"]),
    ("wpengine--list-posts", None),
    ("wpengine--index-cloudinary-asset", ["public_id", "secure_url", "resource_type", "format"]),
    ("wpengine--bulk-index-cloudinary-assets", ["assets"]),
]


@pytest.fixture
def client(settings):
    """Create a test client with the lifespan running."""
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


def rpc(method, params=None, request_id=1):
    body = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        body["params"] = params
    return body


def tool_call(name, arguments, request_id=1):
    return rpc("tools/call", {"name": name, "arguments": arguments}, request_id)


class TestAuthentication:
    """Tests for X-MCP-Token handling."""

    def test_missing_token(self, client):
        response = client.post(ENDPOINT, json=rpc("tools/list"))
        assert response.status_code == 401
        assert response.json() == {
            "code": "rest_forbidden",
            "message": "Authentication required. Please provide X-MCP-Token header.",
            "data": {"status": 401},
        }

    def test_empty_token(self, client):
        response = client.post(ENDPOINT, json=rpc("tools/list"), headers={"X-MCP-Token": ""})
        assert response.status_code == 401
        assert response.json()["message"].startswith("Authentication required")

    def test_wrong_token(self, client):
        response = client.post(ENDPOINT, json=rpc("tools/list"), headers={"X-MCP-Token": "nope"})
        assert response.status_code == 401
        assert response.json() == {
            "code": "rest_forbidden",
            "message": "Invalid authentication token.",
            "data": {"status": 401},
        }

    def test_rejected_call_has_no_side_effects(self, settings):
        """Test a rejected tools/call never reaches the content backend."""
        backend = AsyncMock(spec=ContentBackend)
        app = create_app(settings, content_backend=backend)
        with TestClient(app) as test_client:
            response = test_client.post(
                ENDPOINT,
                json=rpc(
                    "tools/call",
                    {"name": "wpengine--create-post", "arguments": {"title": "T", "content": "C"}},
                ),
                headers={"X-MCP-Token": "wrong"},
            )
        assert response.status_code == 401
        backend.create_post.assert_not_awaited()

    def test_rejected_before_body_parsing(self, client):
        response = client.post(ENDPOINT, content=b"not json")
        assert response.status_code == 401
        assert "jsonrpc" not in response.json()

    def test_oversize_body_without_token(self, settings):
        """Test the token is checked before the body size limit."""
        app = create_app(replace(settings, request_max_bytes=16))
        with TestClient(app) as test_client:
            response = test_client.post(ENDPOINT, json=rpc("tools/list"))
        assert response.status_code == 401
        assert response.json()["code"] == "rest_forbidden"


class TestJsonRpcEndpoint:
    """Tests for the JSON-RPC dispatch over HTTP."""

    def test_initialize(self, client):
        response = client.post(ENDPOINT, json=rpc("initialize", request_id="init"), headers=AUTH)
        assert response.status_code == 200
        assert response.json() == {
            "jsonrpc": "2.0",
            "id": "init",
            "result": {
                "protocolVersion": "2024-11-05",
                "capabilities": {"tools": {}},
                "serverInfo": {"name": "WP Engine MCP Server", "version": "2.0.0"},
            },
        }

    def test_initialize_params_omitted_equals_empty(self, client):
        without = client.post(ENDPOINT, json=rpc("initialize"), headers=AUTH).json()
        with_empty = client.post(ENDPOINT, json=rpc("initialize", {}), headers=AUTH).json()
        assert without == with_empty

    def test_tools_list(self, client):
        """Test the full catalog in declaration order."""
        response = client.post(ENDPOINT, json=rpc("tools/list"), headers=AUTH)
        tools = response.json()["result"]["tools"]
        assert [(tool["name"], tool["inputSchema"].get("required")) for tool in tools] == (
            EXPECTED_TOOLS
        )

    def test_tools_list_idempotent(self, client):
        first = client.post(ENDPOINT, json=rpc("tools/list"), headers=AUTH)
        second = client.post(ENDPOINT, json=rpc("tools/list"), headers=AUTH)
        assert first.content == second.content

    def test_unknown_tool(self, client):
        response = client.post(
            ENDPOINT, json=rpc("tools/call", {"name": "nonexistent-tool"}), headers=AUTH
        )
        body = response.json()
        assert response.status_code == 200
        assert body["result"]["content"][0]["text"] == "Unknown tool: nonexistent-tool"
        assert "error" not in body

    def test_unknown_method(self, client):
        response = client.post(ENDPOINT, json=rpc("ping", request_id=4), headers=AUTH)
        body = response.json()
        assert response.status_code == 200
        assert body["id"] == 4
        assert body["error"] == {"code": -32601, "message": "Method not found: ping"}
        assert "result" not in body

    def test_id_defaults_to_one(self, client):
        response = client.post(ENDPOINT, json={"method": "tools/list"}, headers=AUTH)
        assert response.json()["id"] == 1

    def test_invalid_json_body(self, client):
        response = client.post(ENDPOINT, content=b"{broken", headers=AUTH)
        assert response.status_code == 200
        assert response.json() == {
            "jsonrpc": "2.0",
            "id": 1,
            "error": {"code": -32601, "message": "Method not found: "},
        }

    def test_create_then_get_post(self, client):
        """Test a post round trip through the endpoint."""
        created = client.post(
            ENDPOINT,
            json=rpc(
                "tools/call",
                {
                    "name": "wpengine--create-post",
                    "arguments": {"title": "T", "content": "C", "cloudinary_url": "https://x/y.jpg"},
                },
            ),
            headers=AUTH,
        ).json()
        assert "Cloudinary Image: Embedded" in created["result"]["content"][0]["text"]

        fetched = client.post(
            ENDPOINT,
            json=rpc("tools/call", {"name": "wpengine--get-post", "arguments": {"post_id": 1}}),
            headers=AUTH,
        ).json()
        text = fetched["result"]["content"][0]["text"]
        assert "• Cloudinary URL: https://x/y.jpg" in text

    def test_create_post_missing_content(self, client):
        response = client.post(
            ENDPOINT,
            json=rpc("tools/call", {"name": "wpengine--create-post", "arguments": {"title": "T"}}),
            headers=AUTH,
        )
        assert response.json()["result"]["content"][0]["text"] == (
            "Error: title and content are required"
        )
        assert client.app.state.content_backend.posts == {}

    def test_index_without_search_credentials(self, client):
        response = client.post(
            ENDPOINT,
            json=rpc(
                "tools/call",
                {
                    "name": "wpengine--index-cloudinary-asset",
                    "arguments": {
                        "public_id": "a",
                        "secure_url": "https://x/a.jpg",
                        "resource_type": "image",
                        "format": "jpg",
                    },
                },
            ),
            headers=AUTH,
        )
        assert "credentials not configured" in response.json()["result"]["content"][0]["text"]

    def test_non_finite_id_treated_as_malformed(self, client):
        response = client.post(
            ENDPOINT,
            content=b'{"jsonrpc":"2.0","id":NaN,"method":"tools/list"}',
            headers=AUTH,
        )
        assert response.status_code == 200
        assert response.json() == {
            "jsonrpc": "2.0",
            "id": 1,
            "error": {"code": -32601, "message": "Method not found: "},
        }

    @pytest.mark.parametrize("raw_id", [b"Infinity", b"-Infinity", b"1e999"])
    def test_overflowing_id_treated_as_malformed(self, client, raw_id):
        body = b'{"id":' + raw_id + b',"method":"tools/list"}'
        response = client.post(ENDPOINT, content=body, headers=AUTH)
        assert response.status_code == 200
        assert response.json()["id"] == 1

    def test_index_never_touches_content_backend(self, settings):
        """Test missing search credentials win over an unreachable content store."""
        backend = AsyncMock(spec=ContentBackend)
        backend.get_site_info.side_effect = ContentBackendError("WordPress request failed")
        app = create_app(settings, content_backend=backend)
        with TestClient(app) as test_client:
            single = test_client.post(
                ENDPOINT,
                json=tool_call("wpengine--index-cloudinary-asset", ASSET),
                headers=AUTH,
            ).json()
            bulk = test_client.post(
                ENDPOINT,
                json=tool_call("wpengine--bulk-index-cloudinary-assets", {"assets": [ASSET]}),
                headers=AUTH,
            ).json()

        expected = "Error: Smart Search AI credentials not configured in settings"
        assert single["result"]["content"][0]["text"] == expected
        assert bulk["result"]["content"][0]["text"] == expected
        backend.get_site_info.assert_not_awaited()

    def test_index_with_non_admin_wordpress_user(self, settings, make_search_client):
        """Test indexing works when the WordPress user cannot read settings."""
        wordpress_calls = []

        def wordpress(request):
            wordpress_calls.append(request.url.path)
            return httpx.Response(
                403,
                json={"code": "rest_forbidden", "message": "Sorry, you are not allowed."},
            )

        backend = WordPressRestBackend(
            base_url="https://wp.example.com",
            username="editor",
            app_password="app pass",
            http_client=httpx.AsyncClient(
                base_url="https://wp.example.com/wp-json",
                transport=httpx.MockTransport(wordpress),
            ),
        )
        search_client = make_search_client(
            lambda request: httpx.Response(
                200, json={"data": {"index": {"success": True, "message": "Indexed"}}}
            )
        )
        app = create_app(settings, content_backend=backend, search_client=search_client)
        with TestClient(app) as test_client:
            response = test_client.post(
                ENDPOINT,
                json=tool_call("wpengine--index-cloudinary-asset", ASSET),
                headers=AUTH,
            ).json()

        assert response["result"]["content"][0]["text"].startswith(
            "Cloudinary asset indexed successfully"
        )
        assert wordpress_calls == []
        meta = search_client.sent[0]["body"]["variables"]["input"]["meta"]
        assert meta["source"] == "https://test.example.com"

    def test_bulk_index_with_injected_client(self, settings, make_search_client):
        search_client = make_search_client(
            lambda request: httpx.Response(
                200,
                json={"data": {"bulkIndex": {"success": True, "documents": [{"id": "cloudinary:a"}]}}},
            )
        )
        app = create_app(settings, search_client=search_client)
        with TestClient(app) as test_client:
            response = test_client.post(
                ENDPOINT,
                json=rpc(
                    "tools/call",
                    {
                        "name": "wpengine--bulk-index-cloudinary-assets",
                        "arguments": {
                            "assets": [
                                {"public_id": "a", "secure_url": "u"},
                                {"public_id": "", "secure_url": "u2"},
                            ]
                        },
                    },
                ),
                headers=AUTH,
            )
        assert "• Assets Indexed: 1\n" in response.json()["result"]["content"][0]["text"]
        assert len(search_client.sent[0]["body"]["variables"]["input"]["documents"]) == 1


class TestAppSurface:
    """Tests for the surrounding application."""

    def test_health_needs_no_token(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_custom_namespace(self, settings):
        app = create_app(replace(settings, mcp_namespace="custom/v2"))
        with TestClient(app) as test_client:
            moved = test_client.post("/custom/v2/mcp", json=rpc("tools/list"), headers=AUTH)
            default = test_client.post(ENDPOINT, json=rpc("tools/list"), headers=AUTH)
        assert moved.status_code == 200
        assert default.status_code == 404

    def test_request_too_large(self, settings):
        app = create_app(replace(settings, request_max_bytes=16))
        with TestClient(app) as test_client:
            response = test_client.post(ENDPOINT, json=rpc("tools/list"), headers=AUTH)
        assert response.status_code == 413
        assert response.json()["detail"] == "Request body too large"

    def test_token_generated_when_absent(self, settings, tmp_path):
        """Test a first start persists a generated token that then authenticates."""
        app = create_app(replace(settings, mcp_access_token=None))
        with TestClient(app) as test_client:
            stored = json.loads((tmp_path / "credentials.json").read_text())
            token = stored["access_token"]
            assert len(token) == 32
            response = test_client.post(
                ENDPOINT, json=rpc("tools/list"), headers={"X-MCP-Token": token}
            )
        assert response.status_code == 200
