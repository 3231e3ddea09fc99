"""WP Engine MCP backend.

Exposes WordPress content operations and Smart Search AI indexing as
Model Context Protocol tools over a single JSON-RPC endpoint.
"""

__version__ = "2.0.0"
