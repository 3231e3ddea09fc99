"""WordPress REST API content backend.

Reaches a WordPress site through ``/wp-json`` using an application
password. Post meta is read and written through the REST ``meta`` field,
so the meta keys must be registered with ``show_in_rest`` on the site.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
import structlog

from .base import ContentBackend, ContentBackendError, PostNotFoundError
from .models import ContentItem, PostChanges, PostDraft, SiteInfo

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


def _rendered(value: Any) -> str:
    if isinstance(value, dict):
        return str(value.get("raw") or value.get("rendered") or "")
    return "" if value is None else str(value)


class WordPressRestBackend(ContentBackend):
    """Content store backed by the WordPress REST API.

    Example:
        backend = WordPressRestBackend(
            base_url="https://example.com",
            username="editor",
            app_password="abcd efgh ijkl mnop",
        )
        post = await backend.get_post(42)
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        app_password: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        if http_client is None:
            self._client = httpx.AsyncClient(
                base_url=f"{self._base_url}/wp-json",
                auth=(username, app_password),
                timeout=timeout,
                headers={"Accept": "application/json"},
            )
            self._owns_client = True
        else:
            self._client = http_client
            self._owns_client = False

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.RequestError as exc:
            logger.warning("wordpress_request_failed", method=method, url=url, error=str(exc))
            raise ContentBackendError(f"WordPress request failed: {exc}") from exc

        if response.status_code == 404:
            return None

        if response.status_code >= 400:
            message = f"status {response.status_code}"
            try:
                payload = response.json()
            except ValueError:
                payload = None
            if isinstance(payload, dict) and payload.get("message"):
                message = str(payload["message"])
            logger.warning(
                "wordpress_request_rejected",
                method=method,
                url=url,
                status_code=response.status_code,
            )
            raise ContentBackendError(message, response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise ContentBackendError("WordPress returned a malformed response") from exc

    def _to_item(self, payload: dict[str, Any]) -> ContentItem:
        meta = payload.get("meta")
        metadata: dict[str, str] = {}
        if isinstance(meta, dict):
            for key, value in meta.items():
                if isinstance(value, list):
                    value = value[0] if value else ""
                if value not in (None, ""):
                    metadata[str(key)] = str(value)
        return ContentItem(
            id=int(payload["id"]),
            title=_rendered(payload.get("title")),
            body=_rendered(payload.get("content")),
            status=str(payload.get("status", "")),
            created_at=str(payload.get("date", "")).replace("T", " "),
            permalink=str(payload.get("link", "")),
            metadata=metadata,
        )

    async def _read_settings(self) -> dict[str, Any]:
        """Read site settings; needs manage_options, so other users get none."""
        try:
            return await self._request("GET", "/wp/v2/settings") or {}
        except ContentBackendError as exc:
            if exc.status_code not in (401, 403):
                raise
            logger.info("wordpress_settings_forbidden", status_code=exc.status_code)
            return {}

    async def get_site_info(self) -> SiteInfo:
        index = await self._request("GET", "/") or {}
        settings = await self._read_settings()
        return SiteInfo(
            name=str(settings.get("title") or index.get("name", "")),
            url=str(index.get("url") or self._base_url),
            description=str(settings.get("description") or index.get("description", "")),
            version=str(index.get("version", "")),
            admin_email=str(settings.get("email", "")),
        )

    async def flush_cache(self) -> bool:
        # The REST API exposes no object-cache capability.
        return False

    async def create_post(self, draft: PostDraft) -> ContentItem:
        payload = await self._request(
            "POST",
            "/wp/v2/posts",
            json={"title": draft.title, "content": draft.body, "status": draft.status},
        )
        if payload is None:
            raise ContentBackendError("WordPress posts endpoint not found")
        logger.info("wordpress_post_created", post_id=payload.get("id"))
        return self._to_item(payload)

    async def update_post(self, post_id: int, changes: PostChanges) -> ContentItem:
        if changes.is_empty():
            current = await self.get_post(post_id)
            if current is None:
                raise PostNotFoundError(post_id)
            return current

        body: dict[str, Any] = {}
        if changes.title is not None:
            body["title"] = changes.title
        if changes.body is not None:
            body["content"] = changes.body
        if changes.status is not None:
            body["status"] = changes.status

        payload = await self._request("POST", f"/wp/v2/posts/{post_id}", json=body)
        if payload is None:
            raise PostNotFoundError(post_id)
        logger.info("wordpress_post_updated", post_id=post_id)
        return self._to_item(payload)

    async def get_post(self, post_id: int) -> Optional[ContentItem]:
        payload = await self._request(
            "GET", f"/wp/v2/posts/{post_id}", params={"context": "edit"}
        )
        if payload is None:
            return None
        return self._to_item(payload)

    async def list_posts(self, status: str, limit: int) -> list[ContentItem]:
        payload = await self._request(
            "GET",
            "/wp/v2/posts",
            params={
                "per_page": limit,
                "status": status,
                "orderby": "date",
                "order": "desc",
                "context": "edit",
            },
        )
        if not isinstance(payload, list):
            return []
        return [self._to_item(entry) for entry in payload]

    async def set_meta(self, post_id: int, key: str, value: str) -> None:
        payload = await self._request(
            "POST", f"/wp/v2/posts/{post_id}", json={"meta": {key: value}}
        )
        if payload is None:
            raise PostNotFoundError(post_id)

    async def get_meta(self, post_id: int, key: str) -> Optional[str]:
        post = await self.get_post(post_id)
        if post is None:
            return None
        return post.metadata.get(key)
