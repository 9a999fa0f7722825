"""
Store boundary decoding.

Every row read from the backend goes through `decode_row` so that
malformed documents fail loudly with DecodeError instead of leaking
untyped dicts into the services.
"""

from datetime import datetime, timezone
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from zipparents.errors import DecodeError

ModelT = TypeVar("ModelT", bound=BaseModel)


def utc_now() -> datetime:
    """Current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Current UTC time as ISO string, the format stored in timestamp columns."""
    return utc_now().isoformat()


def dedupe(values: list[Any]) -> list[Any]:
    """Remove duplicates, keeping the first occurrence order."""
    seen = set()
    result = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result


def decode_row(model: type[ModelT], table: str, row: Any) -> ModelT:
    """Validate a raw backend row into `model` or raise DecodeError."""
    if not isinstance(row, dict):
        raise DecodeError(table, ["<row>"], f"expected a mapping, got {type(row).__name__}")
    try:
        return model.model_validate(row)
    except ValidationError as e:
        fields = [".".join(str(part) for part in err["loc"]) for err in e.errors()]
        raise DecodeError(table, fields, str(e)) from e


def decode_rows(model: type[ModelT], table: str, rows: list[Any] | None) -> list[ModelT]:
    """Decode a list of rows (None is treated as empty)."""
    return [decode_row(model, table, row) for row in rows or []]


def validation_errors(error: ValidationError) -> dict[str, str]:
    """Flatten a pydantic ValidationError into field -> first message."""
    errors: dict[str, str] = {}
    for err in error.errors():
        field = str(err["loc"][0]) if err["loc"] else "__all__"
        message = err["msg"]
        # pydantic prefixes messages raised from validators
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, message)
    return errors
