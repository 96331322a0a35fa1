"""Typed payload contracts for service and adapter boundaries.

These models validate operation payload shapes before they leave the
service layer so key regressions (for example ``items`` vs ``results``)
fail fast in tests and during development.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T", bound=BaseModel)


def dump_validated(model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="json")


class PosItem(BaseModel):
    """One POS record as it leaves the service layer."""

    model_config = ConfigDict(extra="forbid")

    id: int
    name: str
    description: str
    type: str
    campus: str
    street: str
    house_number: str
    postal_code: int
    city: str
    created_at: str
    updated_at: str


class PosListResultData(BaseModel):
    """Payload contract for ``PosService.list``."""

    count: int
    items: list[PosItem]


class BatchError(BaseModel):
    """One failed draft within a batch."""

    index: int
    code: str
    error: str


class BatchResultData(BaseModel):
    """Payload contract for ``PosService.create_batch``."""

    created: list[PosItem]
    errors: list[BatchError]


class ClearResultData(BaseModel):
    """Payload contract for ``AdminService.clear``."""

    removed: int
