"""Error taxonomy for the POS directory.

Every error carries a stable ``code`` (mirrored into
:class:`~campuscoffee.services.result.ServiceError`) and a ``detail``
mapping naming the offending field, name, or id.

INVARIANT: Domain errors are surfaced to the caller, never recovered
silently. ``StorageError`` signals that the effect of an operation is
unknown.
"""

from __future__ import annotations

from typing import Any


class PosError(Exception):
    """Base class for all POS directory errors."""

    code: str = "POS_ERROR"

    def __init__(self, message: str, *, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = detail or {}


class ValidationError(PosError):
    """Malformed draft: empty name, unknown enum value, bad postal code."""

    code = "VALIDATION_FAILED"

    def __init__(self, errors: dict[str, str]) -> None:
        summary = "; ".join(f"{field}: {msg}" for field, msg in errors.items())
        super().__init__(f"Invalid POS data — {summary}", detail={"fields": dict(errors)})
        self.errors = dict(errors)


class ConflictError(PosError):
    """The requested state collides with a live record."""

    code = "CONFLICT"


class DuplicateNameError(ConflictError):
    """Another live record already owns the requested name."""

    code = "DUPLICATE_NAME"

    def __init__(self, name: str) -> None:
        super().__init__(f"A POS named {name!r} already exists", detail={"name": name})
        self.name = name


class NotFoundError(PosError):
    """No live record matches the given id or name."""

    code = "NOT_FOUND"

    @classmethod
    def for_id(cls, pos_id: int) -> NotFoundError:
        return cls(f"No POS found with ID: {pos_id}", detail={"id": pos_id})

    @classmethod
    def for_name(cls, name: str) -> NotFoundError:
        return cls(f"No POS found with name: {name!r}", detail={"name": name})


class StorageError(PosError):
    """Opaque infrastructure failure (connectivity, unexpected constraint)."""

    code = "STORAGE_ERROR"
