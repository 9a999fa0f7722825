"""
Store Client Protocol.

Defines the slice of the managed backend that ZipParents services use.
The Supabase client satisfies it directly; tests pass an in-memory fake.

- table() returns a PostgREST-style query builder
  (.select(), .insert(), .update(), .upsert(), .delete(), .eq(), .neq(),
  .in_(), .gte(), .lte(), .order(), .limit(), .range(), .execute()).
- storage.from_(bucket) returns a bucket handle with
  .upload(), .get_public_url(), .remove().
- auth exposes the hosted auth API (sign_up, sign_in_with_password,
  sign_out, get_user, reset_password_for_email, resend).

Services never import supabase directly; they receive a client through
the AuthContext (zipparents.auth.context).
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class StoreClient(Protocol):
    """Document, file and auth access for ZipParents services."""

    def table(self, name: str) -> Any:
        """Return a query builder for the given table."""
        ...

    @property
    def storage(self) -> Any:
        """File storage; `.from_(bucket)` yields a bucket handle."""
        ...

    @property
    def auth(self) -> Any:
        """Hosted authentication API."""
        ...
