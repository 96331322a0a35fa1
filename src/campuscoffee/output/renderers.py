"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from campuscoffee.output.console import create_console, get_output, style_for_type

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from campuscoffee.services.result import ServiceResult

    Renderer = Callable[..., None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    items = result.data.get("items") or result.data.get("created")
    if items and isinstance(items, list):
        return "\n".join(str(item["id"]) for item in items if isinstance(item, dict))

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="pos.ok")
    op = Text(f"  {result.op}", style="pos.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="pos.key")
    if key == "id":
        v = Text(str(value), style="pos.id")
    elif key == "name":
        v = Text(str(value), style="pos.name")
    elif key.endswith("_at"):
        v = Text(str(value), style="pos.timestamp")
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _address(item: dict[str, Any]) -> str:
    return (
        f"{item.get('street', '')} {item.get('house_number', '')}, "
        f"{item.get('postal_code', '')} {item.get('city', '')}"
    )


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {span_data.get('name', '?')}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _pos_table(items: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    """Build a Rich Table for a list of POS records."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="pos.id", no_wrap=True, justify="right")
    table.add_column("Name", style="pos.name")
    table.add_column("Type")
    table.add_column("Campus")
    table.add_column("Address")
    if verbose:
        table.add_column("Description")
        table.add_column("Updated", style="pos.timestamp")

    for item in items:
        pos_type = str(item.get("type", ""))
        row: list[str | Text] = [
            str(item.get("id", "")),
            str(item.get("name", "")),
            Text(pos_type, style=style_for_type(pos_type)),
            str(item.get("campus", "")),
            _address(item),
        ]
        if verbose:
            row.append(str(item.get("description", "")))
            row.append(str(item.get("updated_at", "")))
        table.add_row(*row)

    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="pos.error")
    op = Text(f"  {result.op}", style="pos.op")
    console.print(label, op, Text(" — "), Text(msg))

    if err is None:
        return
    fields = err.detail.get("fields")
    if isinstance(fields, dict):
        # Field errors show even without --verbose.
        for name, problem in fields.items():
            line = f"  [pos.warning]{escape(str(name))}[/pos.warning]: {escape(str(problem))}"
            console.print(line)
    elif verbose and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Renderers ─────────────────────────────────────────────────────────


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render create_pos / update_pos results."""
    _status_line(console, result)
    for key in ("id", "name", "type", "campus"):
        if key in result.data:
            _field(console, key, result.data[key])
    if "street" in result.data:
        _field(console, "address", _address(result.data))
    if "fields_changed" in result.data:
        _field(console, "fields_changed", ", ".join(result.data["fields_changed"]) or "-")
    if verbose:
        for key in ("description", "created_at", "updated_at"):
            if key in result.data:
                _field(console, key, result.data[key])
        _render_meta(console, result)


def _render_single(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render get_pos as a panel."""
    d = result.data
    lines = [
        f"type: {d.get('type')}",
        f"campus: {d.get('campus')}",
        f"address: {_address(d)}",
        f"created: {d.get('created_at')}",
        f"updated: {d.get('updated_at')}",
    ]
    content = "\n".join(lines)
    description = d.get("description", "")
    if description:
        content += f"\n\n{description.strip()}"

    title = f"#{d.get('id', '?')} — {d.get('name', '?')}"
    style = style_for_type(str(d.get("type", "")))
    console.print(Panel(Text(content), title=title, border_style=style or "dim", expand=False))
    if verbose:
        _render_meta(console, result)


def _render_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    if items:
        console.print(_pos_table(items, verbose=verbose))
    count = result.data.get("count", len(items))
    console.print(f"\n{count} point{'s' if count != 1 else ''} of sale")
    if verbose:
        _render_meta(console, result)


def _render_batch(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    created = result.data.get("created", [])
    errors = result.data.get("errors", [])
    _field(console, "created", len(created))
    _field(console, "errors", len(errors))
    if created and verbose:
        console.print()
        console.print(_pos_table(created))
    for err in errors:
        message = escape(str(err.get("error")))
        console.print(f"  [pos.error]error[/pos.error] index={err.get('index')}: {message}")


def _render_clear(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "removed", result.data.get("removed", 0))
    if verbose:
        _render_meta(console, result)


def _render_upgrade(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    for key in ("applied_count", "pending_count", "stamped", "current", "head", "backup_path"):
        if key in d:
            _field(console, key, d[key])
    if "message" in d:
        _field(console, "message", d["message"])
    if verbose and d.get("pending"):
        console.print()
        for p in d["pending"]:
            console.print(f"  {p['revision']}: {p['description']}")


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Renderer] = {
    "create_pos": _render_mutation,
    "update_pos": _render_mutation,
    "create_batch": _render_batch,
    "get_pos": _render_single,
    "list_pos": _render_list,
    "clear": _render_clear,
    "upgrade": _render_upgrade,
}
