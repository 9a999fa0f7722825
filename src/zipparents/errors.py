"""
ZipParents - Domain errors.

Services raise these; the web layer maps them to HTTP responses
(see zipparents.web.app). Onboarding validation failures are returned
as state, not raised.
"""


class ZipParentsError(Exception):
    """Base class for all ZipParents errors."""


class DecodeError(ZipParentsError):
    """A stored document did not match the expected shape."""

    def __init__(self, table: str, fields: list[str], detail: str = ""):
        self.table = table
        self.fields = fields
        self.detail = detail
        super().__init__(f"Malformed {table} record (fields: {', '.join(fields) or '?'})")


class AuthError(ZipParentsError):
    """Authentication failed or the session is unusable."""

    def __init__(self, message: str, code: str | None = None):
        self.code = code
        super().__init__(message)


class NotFoundError(ZipParentsError):
    """Requested record does not exist."""


class PermissionDeniedError(ZipParentsError):
    """Caller is not allowed to perform the action."""


class ConflictError(ZipParentsError):
    """Action conflicts with existing state (duplicate request, already blocked, ...)."""


class ValidationFailedError(ZipParentsError):
    """Input failed validation. `errors` maps field name to message."""

    def __init__(self, errors: dict[str, str] | str):
        if isinstance(errors, str):
            errors = {"__all__": errors}
        self.errors = errors
        super().__init__("; ".join(errors.values()))


class StoreError(ZipParentsError):
    """The backend (documents, files, auth) failed or was unreachable."""
