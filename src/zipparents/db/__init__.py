"""
ZipParents - Database Client.

Supabase access for documents and file storage.
"""

from zipparents.db.client import (
    execute,
    fetch_one,
    get_authenticated_client,
    get_client,
    get_service_client,
)

__all__ = [
    "execute",
    "fetch_one",
    "get_authenticated_client",
    "get_client",
    "get_service_client",
]
