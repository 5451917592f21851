"""Rich output formatting for the release CLI.

All functions write to a :class:`rich.console.Console` instance (typically
bound to *stderr*) so that machine-readable output on *stdout* is never
polluted with human-readable decoration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from release_engine.diff.diff_serializer import summarize_diff

if TYPE_CHECKING:
    from release_engine.models.operations import (
        ConnectionOperation,
        DiffState,
        ProjectOperation,
        TableOperation,
    )


# ---------------------------------------------------------------------------
# Operation colour mapping
# ---------------------------------------------------------------------------

_OPERATION_COLOURS: dict[str, str] = {
    "CREATE": "green",
    "UPDATE": "yellow",
    "DELETE": "red",
}


def _coloured_operation(op_type: str) -> str:
    """Return a Rich markup string with the operation colour-coded by verb."""
    colour = _OPERATION_COLOURS.get(op_type.split("_", 1)[0], "white")
    return f"[{colour}]{op_type}[/{colour}]"


def _flow_row(operation: ProjectOperation) -> tuple[str, str, str]:
    flow = getattr(operation, "new_flow_state", operation.flow_state)
    return "flow", flow.external_id, flow.version.display_name


def _connection_row(operation: ConnectionOperation) -> tuple[str, str, str]:
    connection = getattr(operation, "new_connection_state", operation.connection_state)
    return "connection", connection.external_id, connection.display_name or connection.piece_name


def _table_row(operation: TableOperation) -> tuple[str, str, str]:
    table = getattr(operation, "new_table_state", operation.table_state)
    return "table", table.external_id, table.name


# ---------------------------------------------------------------------------
# Diff summary
# ---------------------------------------------------------------------------


def display_diff_summary(console: Console, diff_state: DiffState) -> None:
    """Render a diff overview followed by one row per operation.

    Parameters
    ----------
    console:
        Rich console to write to (typically stderr).
    diff_state:
        The diff result to display.
    """
    counts = summarize_diff(diff_state)
    header_lines = [
        f"[bold]{op_type}:[/bold] {count}" for op_type, count in counts.items() if count
    ] or ["[dim]No changes detected.[/dim]"]
    console.print(Panel("\n".join(header_lines), title="Project Diff", border_style="blue"))

    if diff_state.is_empty:
        return

    table = Table(
        title="Operations",
        show_lines=False,
        pad_edge=True,
        expand=False,
    )
    table.add_column("#", style="dim", width=4, justify="right")
    table.add_column("Kind")
    table.add_column("Operation")
    table.add_column("External ID", style="bold")
    table.add_column("Name")

    rows = [
        *((op.type.value, *_flow_row(op)) for op in diff_state.operations),
        *((op.type.value, *_connection_row(op)) for op in diff_state.connections),
        *((op.type.value, *_table_row(op)) for op in diff_state.tables),
    ]
    for idx, (op_type, kind, external_id, name) in enumerate(rows, start=1):
        table.add_row(str(idx), kind, _coloured_operation(op_type), escape(external_id), escape(name))

    console.print(table)
    console.print(f"\n[bold]{len(rows)}[/bold] operation(s)")
