"""MCP Server authentication.

Validates the per-request ``X-MCP-Token`` header against the stored
access token. Authentication runs before any JSON-RPC parsing; a denial
is a transport-level rejection, never a protocol error.
"""

from __future__ import annotations

import hashlib
import secrets
import string
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)

MCP_TOKEN_HEADER = "X-MCP-Token"
ACCESS_TOKEN_LENGTH = 32
_TOKEN_ALPHABET = string.ascii_letters + string.digits


class AuthDenialReason(str, Enum):
    """Why a request was rejected."""

    MISSING = "missing"
    INVALID = "invalid"


AUTH_MESSAGES = {
    AuthDenialReason.MISSING: "Authentication required. Please provide X-MCP-Token header.",
    AuthDenialReason.INVALID: "Invalid authentication token.",
}


class MCPAuthError(Exception):
    """Raised when a request fails authentication."""

    def __init__(self, reason: AuthDenialReason) -> None:
        self.reason = reason
        self.message = AUTH_MESSAGES[reason]
        super().__init__(self.message)


class MCPAuthenticator(ABC):
    """Abstract base class for MCP authentication."""

    @abstractmethod
    def authenticate(self, header_token: Optional[str]) -> None:
        """Authenticate a request header value.

        Args:
            header_token: Raw header value, or None when absent

        Raises:
            MCPAuthError: If authentication fails
        """


class MCPTokenAuth(MCPAuthenticator):
    """Shared-secret authentication against a single access token."""

    def __init__(self, access_token: str) -> None:
        if not access_token:
            raise ValueError("access_token must be non-empty")
        self._access_token = access_token

    @staticmethod
    def _fingerprint(token: str) -> str:
        return hashlib.sha256(token.encode()).hexdigest()[:16]

    def authenticate(self, header_token: Optional[str]) -> None:
        if not header_token:
            logger.warning("mcp_auth_missing_token")
            raise MCPAuthError(AuthDenialReason.MISSING)

        if not secrets.compare_digest(
            header_token.encode("utf-8"), self._access_token.encode("utf-8")
        ):
            logger.warning(
                "mcp_auth_invalid_token",
                token_fingerprint=self._fingerprint(header_token),
            )
            raise MCPAuthError(AuthDenialReason.INVALID)


def generate_access_token(length: int = ACCESS_TOKEN_LENGTH) -> str:
    """Generate an opaque access token of letters and digits.

    Args:
        length: Number of characters

    Returns:
        Random token string
    """
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(length))
