"""Data models for the search indexing backend."""

from dataclasses import dataclass, field
from typing import Any, Union

DOCUMENT_ID_PREFIX = "cloudinary:"
ASSET_POST_TYPE = "cloudinary_asset"
TAG_SEPARATOR = ", "


@dataclass(frozen=True)
class SearchBackendCredential:
    """Endpoint and bearer token for the search backend."""

    endpoint_url: str
    bearer_token: str

    def __repr__(self) -> str:
        return f"SearchBackendCredential(endpoint_url={self.endpoint_url!r}, bearer_token='***')"


@dataclass(frozen=True)
class IndexableAsset:
    """A media asset to register for natural-language retrieval.

    Attributes:
        public_id: Asset identifier, unique within the media service
        source_url: Delivery URL of the asset
        resource_type: image, video, raw
        format: File format (jpg, png, mp4, ...)
        tags: Ordered tags, or an already-flattened tag string
    """

    public_id: str
    source_url: str
    resource_type: str = ""
    format: str = ""
    tags: Union[list[str], str] = field(default_factory=list)

    @property
    def document_id(self) -> str:
        return f"{DOCUMENT_ID_PREFIX}{self.public_id}"

    def flattened_tags(self) -> str:
        """Tags as sent on the wire: one comma-joined string."""
        if isinstance(self.tags, str):
            return self.tags
        return TAG_SEPARATOR.join(str(tag) for tag in self.tags)

    def to_document(self) -> dict[str, Any]:
        """Build the search document for this asset."""
        return {
            "id": self.document_id,
            "data": {
                "cloudinary_public_id": self.public_id,
                "cloudinary_url": self.source_url,
                "resource_type": self.resource_type,
                "format": self.format,
                "post_type": ASSET_POST_TYPE,
                "tags": self.flattened_tags(),
            },
        }
