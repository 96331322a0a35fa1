"""POS entity, caller draft, and the single structural validation boundary.

``PosDraft`` is what callers supply for create/update: every field except
the server-assigned ``id`` and the audit timestamps.  ``PointOfSale`` is the
stored entity.  Both are frozen pydantic models.

Validation happens once, in :func:`validate_draft`.  It collects every
field problem into one :class:`~campuscoffee.domain.errors.ValidationError`
so the caller can fix the input in a single round-trip.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from campuscoffee.domain.errors import ValidationError
from campuscoffee.domain.types import CampusType, PosType

DRAFT_FIELDS: tuple[str, ...] = (
    "name",
    "description",
    "type",
    "campus",
    "street",
    "house_number",
    "postal_code",
    "city",
)

_DIGITS = re.compile(r"^[0-9]+$")


# ---------------------------------------------------------------------------
# Validation rules (populated from the [pos] config section by services)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationRules:
    """Deployment-specific limits applied on top of the model's own checks."""

    postal_code_digits: int = 5
    types: frozenset[PosType] = field(default_factory=lambda: frozenset(PosType))
    campuses: frozenset[CampusType] = field(default_factory=lambda: frozenset(CampusType))

    @property
    def max_postal_code(self) -> int:
        return 10**self.postal_code_digits - 1


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class PosDraft(BaseModel):
    """Caller-supplied POS fields (no id, no timestamps).

    Accepts snake_case names or the camelCase wire aliases
    (``houseNumber``, ``postalCode``).
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    name: str
    description: str = ""
    type: PosType
    campus: CampusType
    street: str
    house_number: str
    postal_code: int
    city: str

    @field_validator("name", "street", "house_number", "city")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            msg = "must not be empty"
            raise ValueError(msg)
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _description_default(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("house_number", mode="before")
    @classmethod
    def _house_number_as_text(cls, value: Any) -> Any:
        # "12a" and 12 are both valid house numbers
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("postal_code", mode="before")
    @classmethod
    def _parse_postal_code(cls, value: Any) -> Any:
        if isinstance(value, bool):
            msg = "must be an integer"
            raise ValueError(msg)
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            text = value.strip()
            if not _DIGITS.match(text):
                msg = f"{value!r} is not a non-negative integer"
                raise ValueError(msg)
            return int(text)
        msg = "must be an integer"
        raise ValueError(msg)


class PointOfSale(BaseModel):
    """A stored POS record."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: str
    type: PosType
    campus: CampusType
    street: str
    house_number: str
    postal_code: int
    city: str
    created_at: datetime
    updated_at: datetime

    def changed_fields(self, draft: PosDraft) -> list[str]:
        """Names of caller-owned fields whose value differs in *draft*."""
        return [name for name in DRAFT_FIELDS if getattr(self, name) != getattr(draft, name)]


# ---------------------------------------------------------------------------
# Validation boundary
# ---------------------------------------------------------------------------


def validate_draft(
    data: PosDraft | Mapping[str, Any],
    rules: ValidationRules | None = None,
) -> PosDraft:
    """Validate *data* structurally and against *rules*.

    Raises:
        ValidationError: with one entry per offending field.
    """
    rules = rules or ValidationRules()
    errors: dict[str, str] = {}

    if isinstance(data, PosDraft):
        draft: PosDraft | None = data
    else:
        try:
            draft = PosDraft.model_validate(dict(data))
        except pydantic.ValidationError as exc:
            draft = None
            errors.update(_collect_model_errors(exc))

    if draft is not None:
        if draft.type not in rules.types:
            errors["type"] = _not_allowed(draft.type, rules.types)
        if draft.campus not in rules.campuses:
            errors["campus"] = _not_allowed(draft.campus, rules.campuses)
        if not 0 <= draft.postal_code <= rules.max_postal_code:
            errors["postal_code"] = (
                f"{draft.postal_code} is outside 0..{rules.max_postal_code} "
                f"({rules.postal_code_digits} digits)"
            )

    if errors:
        raise ValidationError(errors)
    assert draft is not None
    return draft


def _collect_model_errors(exc: pydantic.ValidationError) -> dict[str, str]:
    aliases = {to_camel(name): name for name in DRAFT_FIELDS}
    errors: dict[str, str] = {}
    for err in exc.errors():
        loc = err.get("loc") or ("__root__",)
        key = str(loc[0])
        name = aliases.get(key, key)
        message = str(err.get("msg", "invalid value"))
        if message.startswith("Value error, "):
            message = message.removeprefix("Value error, ")
        errors.setdefault(name, message)
    return errors


def _not_allowed(value: str, allowed: Iterable[str]) -> str:
    choices = ", ".join(sorted(str(a) for a in allowed))
    return f"{value!r} is not one of {choices}"


def name_key(name: str, *, case_sensitive: bool = True) -> str:
    """Uniqueness key for *name* under the configured case policy."""
    return name if case_sensitive else name.casefold()
