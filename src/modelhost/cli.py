"""Command-line interface for modelhost."""

from __future__ import annotations

import json
from pathlib import Path

import click

from modelhost import __version__


@click.group()
@click.version_option(version=__version__, prog_name="modelhost")
def main() -> None:
    """modelhost -- run pluggable models over tabular data files.

    Pipeline: Load -> Run -> Script -> Report
    """


# ---------------------------------------------------------------------------
# New
# ---------------------------------------------------------------------------


@main.command()
@click.argument("directory", type=click.Path())
def new(directory: str) -> None:
    """Scaffold a new project at DIRECTORY."""
    from modelhost.project import scaffold_project

    try:
        result = scaffold_project(Path(directory))
    except FileExistsError as e:
        raise click.ClickException(str(e))
    click.echo(f"Created project at {result}")


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def models(as_json: bool) -> None:
    """List registered models and their bound variables."""
    from modelhost.models import get_model_cls, list_models

    entries = []
    for name in list_models():
        cls = get_model_cls(name)
        entries.append({
            "name": name,
            "bound": [
                {"name": d.name, "kind": d.kind, "private": d.private}
                for d in cls.bound
            ],
        })

    if as_json:
        click.echo(json.dumps(entries, indent=2))
        return
    if not entries:
        click.echo("No models registered.")
        return
    for entry in entries:
        names = ", ".join(b["name"] for b in entry["bound"])
        click.echo(f"  {entry['name']:20s} {names}")


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@main.command()
@click.option("--project", "directory", default=".", type=click.Path(exists=True, file_okay=False), help="Project directory.")
def inputs(directory: str) -> None:
    """List the data files and scripts of a project."""
    from modelhost.project import list_inputs

    project_dir = Path(directory)
    for title, key in (("Data", "data_dir"), ("Scripts", "scripts_dir")):
        names = list_inputs(project_dir, key)
        click.echo(f"{title}:")
        if not names:
            click.echo("  (none)")
        for name in names:
            click.echo(f"  {name}")


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------


@main.command()
@click.argument("model_name")
@click.argument("data")
@click.option("--script", "script_path", default=None, help="Script file to run after the model.")
@click.option("--expr", "inline", default=None, help="Inline script to run after the model.")
@click.option("--project", "directory", default=None, type=click.Path(exists=True, file_okay=False), help="Project directory.")
@click.option("--table", "as_table", is_flag=True, help="Print an aligned table instead of TSV.")
def run(
    model_name: str,
    data: str,
    script_path: str | None,
    inline: str | None,
    directory: str | None,
    as_table: bool,
) -> None:
    """Run MODEL_NAME over the DATA file and print the report.

    DATA and --script paths that do not exist as given are looked up in the
    project's data and scripts directories.
    """
    from modelhost.controller import Controller
    from modelhost.errors import EngineError
    from modelhost.project import resolve_input

    project_dir = Path(directory) if directory else None
    try:
        ctl = Controller(model_name, project_dir=project_dir)
        ctl.read_data_from(resolve_input(project_dir, data, "data_dir"))
        ctl.run_model()
        if script_path:
            ctl.run_script_from_file(resolve_input(project_dir, script_path, "scripts_dir"))
        if inline is not None:
            if not inline.strip():
                raise click.ClickException("Script cannot be empty!")
            ctl.run_script(inline)
        text = ctl.get_results_as_tsv()
    except (EngineError, OSError) as e:
        raise click.ClickException(str(e))

    if as_table:
        import polars as pl

        from modelhost.report import report_frame

        with pl.Config(
            tbl_rows=-1,
            tbl_cols=-1,
            tbl_hide_dataframe_shape=True,
            tbl_hide_column_data_types=True,
        ):
            click.echo(str(report_frame(text)))
    else:
        click.echo(text, nl=False)


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@main.command()
@click.option("--project", "directory", default=".", type=click.Path(exists=True, file_okay=False), help="Project directory.")
@click.option("--level", default=None, type=click.Choice(["info", "warning", "error"]), help="Filter by level.")
@click.option("--session", "session_id", default=None, help="Filter by session id.")
@click.option("--limit", default=50, show_default=True, help="Maximum events to show.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def events(directory: str, level: str | None, session_id: str | None, limit: int, as_json: bool) -> None:
    """Show logged events, most recent first."""
    from modelhost.logging.sink import EventSink

    sink = EventSink(Path(directory))
    rows = sink.read_global(level=level, session_id=session_id, limit=limit)
    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return
    if not rows:
        click.echo("No events found.")
        return
    for e in rows:
        code = f" [{e['error_code']}]" if e.get("error_code") else ""
        click.echo(f"{e.get('ts', '')}  {e.get('level', ''):7s} {e.get('event_type', '')}{code}  {e.get('message', '')}")


if __name__ == "__main__":
    main()
