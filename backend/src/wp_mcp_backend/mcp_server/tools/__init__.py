"""MCP Server tools.

Provides the site, post and search indexing tool implementations.
"""

from .posts import register_post_tools
from .search_index import register_search_tools
from .site import register_site_tools

__all__ = [
    "register_post_tools",
    "register_search_tools",
    "register_site_tools",
]
