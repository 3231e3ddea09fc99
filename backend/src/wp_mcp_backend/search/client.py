"""Smart Search AI client.

Posts GraphQL mutations to the search backend with bearer-token auth.
There is no retry layer: each call is a single request bounded by the
client timeout.
"""

from __future__ import annotations

from types import TracebackType
from typing import Any, Optional

import httpx
import structlog

from ..core.errors import BackendError
from .models import SearchBackendCredential

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0

INDEX_MUTATION = """
mutation CreateIndexDocument($input: DocumentInput!) {
  index(input: $input) {
    success
    code
    message
    document {
      id
      data
    }
  }
}
"""

BULK_INDEX_MUTATION = """
mutation CreateBulkIndexDocuments($input: BulkIndexInput!) {
  bulkIndex(input: $input) {
    code
    success
    documents {
      id
    }
  }
}
"""


class SearchBackendError(BackendError):
    """Raised for transport, HTTP or GraphQL failures."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class SearchConfigurationError(SearchBackendError):
    """Raised when no search credentials are configured."""

    def __init__(self) -> None:
        super().__init__("Smart Search AI credentials not configured in settings")


class SmartSearchClient:
    """Async client for the Smart Search AI GraphQL API."""

    def __init__(
        self,
        credential: Optional[SearchBackendCredential],
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize the client.

        Args:
            credential: Endpoint and bearer token; None disables requests
            timeout: Per-request timeout in seconds
            http_client: Optional pre-built client (tests, connection reuse)
        """
        self._credential = credential
        self._timeout = timeout
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def configured(self) -> bool:
        return self._credential is not None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def close(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "SmartSearchClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def request(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """Send one GraphQL request.

        Args:
            query: GraphQL document
            variables: GraphQL variables

        Returns:
            Decoded response body

        Raises:
            SearchConfigurationError: If no credentials are configured
            SearchBackendError: On transport, HTTP or GraphQL errors
        """
        credential = self._credential
        if credential is None:
            raise SearchConfigurationError()

        client = self._get_client()
        try:
            response = await client.post(
                credential.endpoint_url,
                json={"query": query, "variables": variables},
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {credential.bearer_token}",
                },
                timeout=self._timeout,
            )
        except httpx.RequestError as exc:
            logger.warning("smart_search_request_failed", error=str(exc))
            raise SearchBackendError(f"Smart Search AI request failed: {exc}") from exc

        status_code = response.status_code
        try:
            decoded = response.json()
        except ValueError:
            decoded = None

        if isinstance(decoded, dict) and decoded.get("errors"):
            errors = decoded["errors"]
            first = errors[0] if isinstance(errors, list) and errors else {}
            message = "Unknown GraphQL error"
            if isinstance(first, dict) and first.get("message"):
                message = str(first["message"])
            logger.warning("smart_search_graphql_error", error=message, status_code=status_code)
            raise SearchBackendError(f"Smart Search AI Error: {message}", status_code)

        if status_code >= 400:
            logger.warning("smart_search_http_error", status_code=status_code)
            raise SearchBackendError(
                f"Smart Search AI API Error (status {status_code})", status_code
            )

        if not isinstance(decoded, dict):
            raise SearchBackendError(
                "Smart Search AI returned a malformed response", status_code
            )

        return decoded

    async def index_document(
        self, document: dict[str, Any], meta: dict[str, Any]
    ) -> dict[str, Any]:
        """Index a single document.

        Returns:
            The ``index`` mutation payload (may be empty)
        """
        variables = {"input": {**document, "meta": meta}}
        result = await self.request(INDEX_MUTATION, variables)
        logger.info("smart_search_document_indexed", document_id=document.get("id"))
        return _mutation_payload(result, "index")

    async def bulk_index(
        self, documents: list[dict[str, Any]], meta: dict[str, Any]
    ) -> dict[str, Any]:
        """Index several documents in one request.

        Returns:
            The ``bulkIndex`` mutation payload (may be empty)
        """
        variables = {"input": {"documents": documents, "meta": meta}}
        result = await self.request(BULK_INDEX_MUTATION, variables)
        logger.info("smart_search_documents_bulk_indexed", count=len(documents))
        return _mutation_payload(result, "bulkIndex")


def _mutation_payload(result: dict[str, Any], field_name: str) -> dict[str, Any]:
    data = result.get("data")
    if not isinstance(data, dict):
        return {}
    payload = data.get(field_name)
    return payload if isinstance(payload, dict) else {}
