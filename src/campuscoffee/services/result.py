"""ServiceResult and ServiceError — the universal service contract.

INVARIANT: All service-layer methods return ServiceResult.
The CLI (and any future transport) consumes this type and owns the
mapping from ``error.code`` to exit or status codes.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from campuscoffee.domain.errors import PosError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: PosError) -> ServiceError:
        """Carry a domain error's code, message, and detail over unchanged."""
        return cls(code=exc.code, message=exc.message, detail=dict(exc.detail))


class ServiceResult(BaseModel):
    """Universal return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"create_pos"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (timing spans when verbose).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(cls, op: str, exc: PosError, **extra: Any) -> ServiceResult:
        return cls(ok=False, op=op, error=ServiceError.from_exception(exc), **extra)
