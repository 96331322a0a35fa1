"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy Database initialization, service
construction, and centralized result emission (stdout/stderr routing +
exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from campuscoffee.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from campuscoffee.config.settings import CoffeeSettings
    from campuscoffee.infrastructure.store import Database
    from campuscoffee.services.admin import AdminService
    from campuscoffee.services.pos import PosService
    from campuscoffee.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The database is opened on first use so ``--help`` and ``--version``
    never touch storage.
    """

    def __init__(self, settings: CoffeeSettings) -> None:
        self.settings = settings
        self._database: Database | None = None

        from campuscoffee.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            log_json=settings.log_json,
            sql_echo=settings.database.echo,
        )

        if settings.verbose:
            from campuscoffee.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def database(self) -> Database:
        """The database handle (created lazily on first access)."""
        if self._database is None:
            from campuscoffee.domain.errors import PosError
            from campuscoffee.infrastructure.store import Database

            try:
                self._database = Database(self.settings)
            except PosError as exc:
                raise click.ClickException(f"Cannot open database: {exc.message}") from exc
        return self._database

    def pos_service(self) -> PosService:
        from campuscoffee.services.pos import PosService

        return PosService(self.database.pos_repository(), self.settings.pos)

    def admin_service(self) -> AdminService:
        from campuscoffee.services.admin import AdminService

        return AdminService(self.database.pos_repository())

    def close(self) -> None:
        if self._database is not None:
            self._database.close()
            self._database = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
