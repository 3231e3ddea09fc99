"""Persistent credential store for the MCP endpoint.

Holds the inbound access token and the outbound Smart Search AI
credentials in a small JSON file. Request handling works from one
immutable snapshot taken at startup; only the operator commands write
to the file.
"""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import structlog

from .config import Settings
from .mcp_server.auth import generate_access_token
from .search import SearchBackendCredential

logger = structlog.get_logger(__name__)

ACCESS_TOKEN_KEY = "access_token"
SEARCH_URL_KEY = "smart_search_url"
SEARCH_TOKEN_KEY = "smart_search_token"


class CredentialStoreError(Exception):
    """Raised when the credential file cannot be read or written."""


@dataclass(frozen=True)
class Credentials:
    """Snapshot of the credentials in effect."""

    access_token: str
    search: Optional[SearchBackendCredential] = None


def _search_credential(url: Optional[str], token: Optional[str]) -> Optional[SearchBackendCredential]:
    if url and token:
        return SearchBackendCredential(endpoint_url=url, bearer_token=token)
    return None


class CredentialStore:
    """JSON-file backed credential storage.

    Environment overrides take priority over stored values and are never
    written back to the file.
    """

    def __init__(
        self,
        path: str | Path,
        access_token_override: Optional[str] = None,
        search_url_override: Optional[str] = None,
        search_token_override: Optional[str] = None,
    ) -> None:
        self._path = Path(path)
        self._access_token_override = access_token_override
        self._search_url_override = search_url_override
        self._search_token_override = search_token_override

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise CredentialStoreError(
                f"Could not read credential file {self._path}: {exc}"
            ) from exc
        if not isinstance(data, dict):
            raise CredentialStoreError(
                f"Credential file {self._path} must contain a JSON object"
            )
        return data

    def _write(self, data: dict[str, Any]) -> None:
        """Replace the credential file atomically."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=str(self._path.parent), prefix=".mcp_credentials.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2, sort_keys=True)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise CredentialStoreError(
                f"Could not write credential file {self._path}: {exc}"
            ) from exc

    def load(self) -> Credentials:
        """Load the credential snapshot.

        Generates and persists an access token the first time none is
        available.

        Returns:
            Immutable Credentials snapshot
        """
        data = self._read()

        access_token = self._access_token_override or data.get(ACCESS_TOKEN_KEY) or ""
        if not access_token:
            access_token = generate_access_token()
            data[ACCESS_TOKEN_KEY] = access_token
            self._write(data)
            logger.info("mcp_access_token_generated", path=str(self._path))

        search = _search_credential(
            self._search_url_override or data.get(SEARCH_URL_KEY),
            self._search_token_override or data.get(SEARCH_TOKEN_KEY),
        )
        logger.info(
            "mcp_credentials_loaded",
            path=str(self._path),
            access_token_source="env" if self._access_token_override else "file",
            search_configured=search is not None,
        )
        return Credentials(access_token=access_token, search=search)

    def save_search_credentials(self, url: str, token: str) -> None:
        """Persist the Smart Search AI endpoint and bearer token."""
        data = self._read()
        data[SEARCH_URL_KEY] = url.strip()
        data[SEARCH_TOKEN_KEY] = token.strip()
        self._write(data)
        logger.info("smart_search_credentials_saved", path=str(self._path))

    def rotate_access_token(self) -> str:
        """Generate, persist and return a new access token.

        An environment override still wins over the rotated value.
        """
        data = self._read()
        token = generate_access_token()
        data[ACCESS_TOKEN_KEY] = token
        self._write(data)
        logger.info(
            "mcp_access_token_rotated",
            path=str(self._path),
            overridden=bool(self._access_token_override),
        )
        return token

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialStore":
        """Build a store from application settings."""
        return cls(
            settings.mcp_credentials_path,
            access_token_override=settings.mcp_access_token,
            search_url_override=settings.smart_search_url,
            search_token_override=settings.smart_search_token,
        )
