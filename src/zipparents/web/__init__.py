"""ZipParents HTTP API."""
