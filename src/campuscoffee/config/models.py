"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, campuscoffee.toml only contains
overrides.  A fresh deployment needs no config file at all.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from campuscoffee.domain.pos import ValidationRules
from campuscoffee.domain.types import CampusType, PosType

DEFAULT_DATABASE_URL = "sqlite:///campuscoffee.db"


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True}

    url: str = DEFAULT_DATABASE_URL
    echo: bool = False


class PosConfig(BaseModel):
    """[pos] section — validation policy for POS drafts."""

    model_config = {"frozen": True}

    case_sensitive_names: bool = True
    postal_code_digits: int = Field(default=5, ge=1, le=10)
    types: tuple[PosType, ...] = tuple(PosType)
    campuses: tuple[CampusType, ...] = tuple(CampusType)

    @field_validator("types", "campuses")
    @classmethod
    def _non_empty(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            msg = "at least one member must be allowed"
            raise ValueError(msg)
        return value

    def validation_rules(self) -> ValidationRules:
        """Translate this section into domain-level validation rules."""
        return ValidationRules(
            postal_code_digits=self.postal_code_digits,
            types=frozenset(self.types),
            campuses=frozenset(self.campuses),
        )


class CoffeeConfig(BaseModel):
    """Root config model mirroring campuscoffee.toml structure."""

    model_config = {"frozen": True}

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    pos: PosConfig = Field(default_factory=PosConfig)
