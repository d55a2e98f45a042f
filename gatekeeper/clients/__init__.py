"""Clients for external data sources."""
from .blocklist import BlocklistClient, BlocklistError  # noqa: F401
