"""ZipParents - Connections between parents."""

from zipparents.connections.service import (
    ConnectionEntry,
    are_connected,
    connection_status,
    list_connections,
    pending_count,
    pending_requests,
    respond,
    send_request,
)

__all__ = [
    "ConnectionEntry",
    "are_connected",
    "connection_status",
    "list_connections",
    "pending_count",
    "pending_requests",
    "respond",
    "send_request",
]
