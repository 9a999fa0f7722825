"""
ZipParents - Supabase Client.

Low-level backend access. Every query and upload goes through the
helpers here so SDK failures surface as StoreError.
"""

import logging
from typing import Any

from supabase import Client, ClientOptions, create_client

from zipparents.config import settings
from zipparents.db.adapter import StoreClient
from zipparents.errors import StoreError

logger = logging.getLogger(__name__)

# Singleton client instances
_client: Client | None = None
_service_client: Client | None = None


def get_client() -> Client:
    """
    Get the anonymous Supabase client.

    Used for sign-up / sign-in calls that happen before a session exists.
    """
    global _client

    if _client is None:
        _client = create_client(
            settings.supabase_url,
            settings.supabase_anon_key,
        )

    return _client


def get_service_client() -> Client:
    """
    Get the service-role client.

    Bypasses row level security. Only for token validation, admin
    tooling and scripts.
    """
    global _service_client

    if _service_client is None:
        _service_client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
        )

    return _service_client


def get_authenticated_client(access_token: str) -> Client:
    """
    Create a client that acts as the user owning `access_token`.

    Row level security applies. One client per session; not cached.
    """
    return create_client(
        settings.supabase_url,
        settings.supabase_anon_key,
        options=ClientOptions(headers={"Authorization": f"Bearer {access_token}"}),
    )


# =============================================================================
# Query helpers
# =============================================================================


def execute(query: Any, description: str) -> Any:
    """Run a query builder, wrapping backend failures in StoreError."""
    try:
        return query.execute()
    except Exception as e:
        logger.error(f"Store call failed ({description}): {e}")
        raise StoreError(f"Failed to {description}") from e


def fetch_one(client: StoreClient, table: str, description: str, **filters: Any) -> dict | None:
    """Fetch the first row matching equality filters, or None."""
    query = client.table(table).select("*")
    for column, value in filters.items():
        query = query.eq(column, value)
    result = execute(query.limit(1), description)
    rows = result.data or []
    return rows[0] if rows else None


def insert_one(client: StoreClient, table: str, data: dict, description: str) -> dict:
    """Insert a row and return it as stored."""
    result = execute(client.table(table).insert(data), description)
    if not result.data:
        raise StoreError(f"Failed to {description}: no row returned")
    return result.data[0]


def update_one(client: StoreClient, table: str, row_id: str, updates: dict, description: str) -> dict:
    """Merge `updates` into the row with id `row_id` and return it."""
    result = execute(client.table(table).update(updates).eq("id", row_id), description)
    if not result.data:
        raise StoreError(f"Failed to {description}: no row updated")
    return result.data[0]


# =============================================================================
# File storage
# =============================================================================


def upload_file(
    client: StoreClient,
    bucket: str,
    path: str,
    data: bytes,
    content_type: str,
) -> str:
    """Upload bytes to `bucket/path` and return the public URL."""
    handle = client.storage.from_(bucket)
    try:
        handle.upload(path=path, file=data, file_options={"content-type": content_type})
        return handle.get_public_url(path)
    except Exception as e:
        logger.error(f"Upload to {bucket}/{path} failed: {e}")
        raise StoreError("Failed to upload file") from e


def remove_file(client: StoreClient, bucket: str, path: str) -> None:
    """Delete `bucket/path`. Raises StoreError on failure."""
    try:
        client.storage.from_(bucket).remove([path])
    except Exception as e:
        logger.warning(f"Delete of {bucket}/{path} failed: {e}")
        raise StoreError("Failed to delete file") from e


def storage_path_from_url(url: str, bucket: str) -> str | None:
    """
    Recover the object path from a public URL.

    Public URLs look like .../storage/v1/object/public/<bucket>/<path>.
    """
    marker = f"/{bucket}/"
    if marker not in url:
        return None
    path = url.split(marker, 1)[1].split("?", 1)[0]
    return path or None
