"""Search indexing backend client."""

from .client import (
    BULK_INDEX_MUTATION,
    INDEX_MUTATION,
    SearchBackendError,
    SearchConfigurationError,
    SmartSearchClient,
)
from .models import IndexableAsset, SearchBackendCredential

__all__ = [
    "BULK_INDEX_MUTATION",
    "INDEX_MUTATION",
    "IndexableAsset",
    "SearchBackendCredential",
    "SearchBackendError",
    "SearchConfigurationError",
    "SmartSearchClient",
]
