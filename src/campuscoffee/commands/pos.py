"""Command group: the POS directory (create, update, list, get, show, import)."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, TypeVar

import click

from campuscoffee.commands._base import CoffeeGroup
from campuscoffee.domain.types import CampusType, PosType

if TYPE_CHECKING:
    from collections.abc import Callable

    from campuscoffee.commands._context import AppContext


def _upper(_ctx: click.Context, _param: click.Parameter, value: str | None) -> str | None:
    # Enum values are upper case; accept "cafe" as well as "CAFE".
    return value.upper() if value is not None else None


F = TypeVar("F", bound="Callable[..., Any]")


def _draft_options(func: F) -> F:
    """Attach the caller-owned POS fields shared by ``create`` and ``update``."""
    options = [
        click.option(
            "--type",
            "pos_type",
            required=True,
            callback=_upper,
            help=f"POS type ({', '.join(t.value for t in PosType)}).",
        ),
        click.option(
            "--campus",
            required=True,
            callback=_upper,
            help=f"Campus ({', '.join(c.value for c in CampusType)}).",
        ),
        click.option("--street", required=True, help="Street name."),
        click.option("--house-number", required=True, help="House number, e.g. 12 or 12a."),
        click.option("--postal-code", required=True, help="Numeric postal code."),
        click.option("--city", required=True, help="City."),
        click.option("--description", default="", help="Free-text description."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _draft(name: str, pos_type: str, campus: str, **fields: str) -> dict[str, Any]:
    return {"name": name, "type": pos_type, "campus": campus, **fields}


_POS_EXAMPLES = """\
  campuscoffee pos create "Central Café" --type CAFE --campus NORTH \\
      --street Main --house-number 1 --postal-code 12345 --city Town
  campuscoffee pos list
  campuscoffee pos get "Central Café"
  campuscoffee --json pos show 1
  campuscoffee pos import drafts.json --partial"""


@click.group(cls=CoffeeGroup, examples=_POS_EXAMPLES)
def pos() -> None:
    """Create, update, and look up Points of Sale."""


@pos.command(
    examples="""\
  campuscoffee pos create "Central Café" --type CAFE --campus NORTH \\
      --street Main --house-number 1 --postal-code 12345 --city Town
  campuscoffee pos create "Lib Kiosk" --type kiosk --campus south \\
      --street Library --house-number 2b --postal-code 54321 --city Town \\
      --description "Ground floor\""""
)
@click.argument("name")
@_draft_options
@click.pass_obj
def create(
    app: AppContext,
    name: str,
    pos_type: str,
    campus: str,
    street: str,
    house_number: str,
    postal_code: str,
    city: str,
    description: str,
) -> None:
    """Create a new POS named NAME."""
    draft = _draft(
        name,
        pos_type,
        campus,
        street=street,
        house_number=house_number,
        postal_code=postal_code,
        city=city,
        description=description,
    )
    app.emit(app.pos_service().create(draft))


@pos.command(
    examples="""\
  campuscoffee pos update 1 --name "Central Café" --type CAFE --campus NORTH \\
      --street Main --house-number 1 --postal-code 12345 --city Town \\
      --description "Now open till 9pm\""""
)
@click.argument("pos_id", metavar="ID", type=int)
@click.option("--name", required=True, help="POS name (may stay the same).")
@_draft_options
@click.pass_obj
def update(
    app: AppContext,
    pos_id: int,
    name: str,
    pos_type: str,
    campus: str,
    street: str,
    house_number: str,
    postal_code: str,
    city: str,
    description: str,
) -> None:
    """Replace every field of POS ID.

    ID and the creation time are kept; the update time is refreshed.
    """
    draft = _draft(
        name,
        pos_type,
        campus,
        street=street,
        house_number=house_number,
        postal_code=postal_code,
        city=city,
        description=description,
    )
    app.emit(app.pos_service().update(pos_id, draft))


@pos.command(
    "list",
    examples="""\
  campuscoffee pos list
  campuscoffee -q pos list
  campuscoffee --json pos list""",
)
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List all POS in creation order."""
    app.emit(app.pos_service().list())


@pos.command(
    examples="""\
  campuscoffee pos get "Central Café"
  campuscoffee --json pos get "Lib Kiosk\""""
)
@click.argument("name")
@click.pass_obj
def get(app: AppContext, name: str) -> None:
    """Show the POS named NAME."""
    app.emit(app.pos_service().get_by_name(name))


@pos.command(
    examples="""\
  campuscoffee pos show 1
  campuscoffee --json pos show 1""",
)
@click.argument("pos_id", metavar="ID", type=int)
@click.pass_obj
def show(app: AppContext, pos_id: int) -> None:
    """Show the POS with identifier ID."""
    app.emit(app.pos_service().get(pos_id))


@pos.command(
    "import",
    examples="""\
  campuscoffee pos import drafts.json
  campuscoffee pos import drafts.json --partial
  campuscoffee --json pos import drafts.json""",
)
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--partial", is_flag=True, help="Continue past failing items.")
@click.pass_obj
def import_cmd(app: AppContext, file: str, partial: bool) -> None:
    """Create several POS from a JSON file.

    FILE must contain a JSON array of objects with the POS fields
    (snake_case or camelCase keys).
    """
    from campuscoffee.services.result import ServiceError, ServiceResult

    try:
        with open(file, encoding="utf-8") as f:
            items = json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        app.emit(
            ServiceResult(
                ok=False,
                op="create_batch",
                error=ServiceError(
                    code="INVALID_FILE",
                    message=f"Error reading {file}: {exc}",
                ),
            )
        )
        return

    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        app.emit(
            ServiceResult(
                ok=False,
                op="create_batch",
                error=ServiceError(
                    code="INVALID_FORMAT",
                    message="JSON file must contain a top-level array of objects.",
                ),
            )
        )
        return

    app.emit(app.pos_service().create_batch(items, partial=partial))
