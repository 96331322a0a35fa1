"""Command group: maintenance (clear, upgrade)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from campuscoffee.commands._base import CoffeeGroup

if TYPE_CHECKING:
    from campuscoffee.commands._context import AppContext


@click.group(
    cls=CoffeeGroup,
    examples="""\
  campuscoffee admin clear --yes
  campuscoffee admin upgrade --check""",
)
def admin() -> None:
    """Maintenance operations on the POS database."""


@admin.command(
    examples="""\
  campuscoffee admin clear
  campuscoffee admin clear --yes
  campuscoffee --json admin clear --yes""",
)
@click.option("--yes", "assume_yes", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_obj
def clear(app: AppContext, assume_yes: bool) -> None:
    """Delete every POS record."""
    if not assume_yes:
        click.confirm("Delete all points of sale?", abort=True, err=True)
    app.emit(app.admin_service().clear())


@admin.command(
    examples="""\
  campuscoffee admin upgrade
  campuscoffee admin upgrade --check
  campuscoffee --json admin upgrade --check""",
)
@click.option(
    "--check", "check_only", is_flag=True, help="Show pending migrations without applying."
)
@click.pass_obj
def upgrade(app: AppContext, check_only: bool) -> None:
    """Run pending database migrations."""
    from campuscoffee.services.upgrade import UpgradeService

    svc = UpgradeService(app.database)
    app.emit(svc.check_pending() if check_only else svc.apply())
