"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``CAMPUSCOFFEE_*`` prefix
  3. TOML file    — ``campuscoffee.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
reuses the walk-up discovery from :mod:`campuscoffee.config.discovery`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource
from sqlalchemy.engine import make_url

from campuscoffee.config.discovery import find_config
from campuscoffee.config.models import DatabaseConfig, PosConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``campuscoffee.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class CoffeeSettings(BaseSettings):
    """Unified settings for the campuscoffee CLI.

    Attributes:
        root: Directory relative SQLite paths resolve against (parent of
            ``campuscoffee.toml``, or CWD if no config found).
        config_path: The TOML file in effect, or None.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "CAMPUSCOFFEE_",
        "env_nested_delimiter": "__",
    }

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    pos: PosConfig = Field(default_factory=PosConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        db_url: str | None = None,
        **cli_flags: Any,
    ) -> CoffeeSettings:
        """Construct settings from CLI invocation.

        Discovers ``campuscoffee.toml`` via walk-up (or explicit
        *config_path*), resolves *root* from the config file's parent
        directory, and merges CLI flags as highest-priority overrides.
        ``--db`` replaces only ``database.url``.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(root)

        resolved_root = root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            settings = cls(
                root=resolved_root,
                config_path=toml_path,
                **cli_flags,
            )
        finally:
            _tls.toml_path = None

        if db_url:
            database = settings.database.model_copy(update={"url": db_url})
            settings = settings.model_copy(update={"database": database})
        return settings

    @property
    def database_url(self) -> str:
        """``database.url`` with relative SQLite paths anchored at :attr:`root`."""
        url = make_url(self.database.url)
        if url.get_backend_name() != "sqlite":
            return self.database.url
        path = url.database
        if not path or path == ":memory:" or Path(path).is_absolute():
            return self.database.url
        return url.set(database=str(self.root / path)).render_as_string(hide_password=False)
