"""Release CLI application -- Typer-based interface to the project differ.

Human-readable output goes to *stderr* via Rich; machine-readable output
(diff JSON) goes to *stdout* or to a file so that pipelines can compose
cleanly.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from release_cli.display import display_diff_summary
from release_engine.config import Settings, load_settings
from release_engine.diff.diff_serializer import StateLoadError, load_project_state, serialize_diff
from release_engine.diff.project_diff import diff
from release_engine.flow.piece_versions import is_same_version
from release_engine.logging_config import configure_logging
from release_engine.models.state import ProjectState

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App & global state
# ---------------------------------------------------------------------------

app = typer.Typer(
    name="release-diff",
    help="Compare project states and list the operations a release would apply.",
    no_args_is_help=True,
)
console = Console(stderr=True)

# Populated by the Typer callback.
_settings: Settings | None = None


@app.callback()
def _global_options(
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Log level for engine diagnostics (DEBUG, INFO, WARNING, ...).",
        envvar="RELEASE_LOG_LEVEL",
    ),
) -> None:
    """Global options applied to every command."""
    global _settings  # noqa: PLW0603
    try:
        _settings = load_settings(log_level=log_level)
    except ValidationError as exc:
        console.print(f"[red]Invalid settings:[/red] {exc.errors()[0]['msg']}")
        raise typer.Exit(code=1) from exc
    configure_logging(_settings)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_state(path: Path, label: str) -> ProjectState:
    """Read a state file, exiting with code 1 on any problem."""
    if not path.is_file():
        console.print(f"[red]{label} state file not found:[/red] {escape(str(path))}")
        raise typer.Exit(code=1)
    try:
        return load_project_state(path.read_bytes())
    except StateLoadError as exc:
        console.print(f"[red]Invalid {label} state in {escape(str(path))}:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("diff")
def diff_command(
    current: Path = typer.Argument(..., help="JSON export of the current project state."),
    new: Path = typer.Argument(..., help="JSON export of the desired project state."),
    json_mode: bool = typer.Option(
        False,
        "--json/--no-json",
        help="Emit the diff as JSON to stdout instead of a summary table.",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Also write the diff JSON to this file.",
    ),
) -> None:
    """Diff CURRENT against NEW and list the resulting operations."""
    current_state = _load_state(current, "current")
    new_state = _load_state(new, "new")
    logger.debug(
        "Diffing %s (%d flows) against %s (%d flows)",
        current,
        len(current_state.flows),
        new,
        len(new_state.flows),
    )

    result = asyncio.run(diff(current_state, new_state, settings=_settings))
    payload = serialize_diff(result)

    if output is not None:
        output.write_text(payload + "\n", encoding="utf-8")
        console.print(f"Diff written to [bold]{escape(str(output))}[/bold]")

    if json_mode:
        typer.echo(payload)
    else:
        display_diff_summary(console, result)


@app.command("version-check")
def version_check_command(
    version_one: str = typer.Argument(..., help="First piece version (exact or ^/~ range)."),
    version_two: str = typer.Argument(..., help="Second piece version (exact or ^/~ range)."),
) -> None:
    """Exit 0 when two piece versions are compatible, 1 otherwise."""
    if is_same_version(version_one, version_two):
        console.print(f"[green]compatible[/green] {escape(version_one)} ~ {escape(version_two)}")
        return
    console.print(f"[red]incompatible[/red] {escape(version_one)} != {escape(version_two)}")
    raise typer.Exit(code=1)
