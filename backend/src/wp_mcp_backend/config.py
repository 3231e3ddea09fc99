"""Configuration management for the WP Engine MCP backend."""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

CONTENT_BACKENDS = frozenset({"memory", "wordpress"})


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    app_env: str
    backend_host: str
    backend_port: int
    request_max_bytes: int
    # MCP endpoint
    mcp_namespace: str
    mcp_tool_prefix: str
    mcp_server_name: str
    mcp_server_version: str
    mcp_tool_timeout_seconds: float
    # Credential store; env values override the file and are never persisted
    mcp_credentials_path: str
    mcp_access_token: Optional[str]
    smart_search_url: Optional[str]
    smart_search_token: Optional[str]
    smart_search_timeout_seconds: float
    # Content backend
    content_backend: str
    wordpress_url: Optional[str]
    wordpress_user: Optional[str]
    wordpress_app_password: Optional[str]
    site_name: str
    site_url: str
    site_description: str
    site_admin_email: str
    site_wordpress_version: str


def _optional(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


def load_settings() -> Settings:
    """
    Load settings from environment variables.

    Returns:
        Settings instance with all configuration values

    Raises:
        ValueError: If a value is malformed or a required variable is missing
    """
    load_dotenv()

    app_env = os.getenv("APP_ENV", "development").strip().lower()

    try:
        backend_port = int(os.getenv("BACKEND_PORT", "8000"))
    except ValueError as exc:
        raise ValueError(
            "BACKEND_PORT must be a valid integer. Check your .env file."
        ) from exc
    try:
        request_max_bytes = int(os.getenv("REQUEST_MAX_BYTES", "1048576"))
    except ValueError as exc:
        raise ValueError(
            "REQUEST_MAX_BYTES must be a valid integer. Check your .env file."
        ) from exc
    if request_max_bytes < 1:
        raise ValueError("REQUEST_MAX_BYTES must be >= 1.")

    try:
        mcp_tool_timeout_seconds = float(os.getenv("MCP_TOOL_TIMEOUT_SECONDS", "60"))
        smart_search_timeout_seconds = float(os.getenv("SMART_SEARCH_TIMEOUT_SECONDS", "30"))
    except ValueError as exc:
        raise ValueError(
            "MCP_TOOL_TIMEOUT_SECONDS and SMART_SEARCH_TIMEOUT_SECONDS must be numbers."
        ) from exc
    if mcp_tool_timeout_seconds <= 0 or smart_search_timeout_seconds <= 0:
        raise ValueError("Timeouts must be > 0.")

    mcp_namespace = os.getenv("MCP_NAMESPACE", "wpengine/v1").strip().strip("/")
    if not mcp_namespace:
        raise ValueError("MCP_NAMESPACE must not be empty.")

    content_backend = os.getenv("CONTENT_BACKEND", "memory").strip().lower()
    if content_backend not in CONTENT_BACKENDS:
        raise ValueError("CONTENT_BACKEND must be 'memory' or 'wordpress'.")

    wordpress_url = _optional("WORDPRESS_URL")
    wordpress_user = _optional("WORDPRESS_USER")
    wordpress_app_password = _optional("WORDPRESS_APP_PASSWORD")
    if content_backend == "wordpress":
        missing = [
            key
            for key, value in (
                ("WORDPRESS_URL", wordpress_url),
                ("WORDPRESS_USER", wordpress_user),
                ("WORDPRESS_APP_PASSWORD", wordpress_app_password),
            )
            if not value
        ]
        if missing:
            raise ValueError(
                "Missing required environment variables for CONTENT_BACKEND=wordpress: "
                + ", ".join(missing)
                + ". Copy .env.example to .env and fill in the values."
            )

    backend_host = os.getenv("BACKEND_HOST", "0.0.0.0")

    return Settings(
        app_env=app_env,
        backend_host=backend_host,
        backend_port=backend_port,
        request_max_bytes=request_max_bytes,
        mcp_namespace=mcp_namespace,
        mcp_tool_prefix=os.getenv("MCP_TOOL_PREFIX", "wpengine--"),
        mcp_server_name=os.getenv("MCP_SERVER_NAME", "WP Engine MCP Server"),
        mcp_server_version=os.getenv("MCP_SERVER_VERSION", "2.0.0"),
        mcp_tool_timeout_seconds=mcp_tool_timeout_seconds,
        mcp_credentials_path=os.getenv("MCP_CREDENTIALS_PATH", "./.mcp_credentials.json"),
        mcp_access_token=_optional("MCP_ACCESS_TOKEN"),
        smart_search_url=_optional("SMART_SEARCH_URL"),
        smart_search_token=_optional("SMART_SEARCH_TOKEN"),
        smart_search_timeout_seconds=smart_search_timeout_seconds,
        content_backend=content_backend,
        wordpress_url=wordpress_url,
        wordpress_user=wordpress_user,
        wordpress_app_password=wordpress_app_password,
        site_name=os.getenv("SITE_NAME", "My WordPress Site"),
        site_url=(_optional("SITE_URL") or f"http://localhost:{backend_port}").rstrip("/"),
        site_description=os.getenv("SITE_DESCRIPTION", "Just another WordPress site"),
        site_admin_email=os.getenv("SITE_ADMIN_EMAIL", "admin@example.com"),
        site_wordpress_version=os.getenv("SITE_WORDPRESS_VERSION", "6.4.2"),
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once
    from environment variables.

    Returns:
        Cached Settings instance
    """
    return load_settings()
