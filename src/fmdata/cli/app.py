"""
Root Typer application for the fmdata CLI.

    fmdata create Heroes -f name="Han Solo" -f height=52 --script "Log Edit" --merge
    fmdata edit Heroes 147 -f name="Luke Skywalker" --mod-id 3
    fmdata delete Heroes 147 --scripts '[{"name": "Audit", "phase": "prerequest"}]'
"""

from __future__ import annotations

import typer
from typer import Typer

from fmdata.cli.utils import build_options, parse_fields, run_operation
from fmdata.core.errors import ConfigError
from fmdata.core.logging import configure_logging
from fmdata.core.settings import get_settings

app = Typer(
    name="fmdata",
    help="fmdata: create, edit and delete FileMaker records through the Data API.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from fmdata import __version__

        typer.echo(f"fmdata {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Override FILEMAKER_LOG_LEVEL."
    ),
) -> None:
    """fmdata CLI: record operations against a FileMaker Data API server."""
    settings = get_settings()
    try:
        configure_logging(
            level=log_level or settings.log_level,
            json_format=settings.log_json,
            service="fmdata-cli",
        )
    except ConfigError as exc:
        raise typer.BadParameter(exc.message, param_hint="--log-level") from exc


# ── Shared options ───────────────────────────────────────────────────────

FieldOption = typer.Option(None, "--field", "-f", help="Field value as key=value (repeatable).")
ScriptOption = typer.Option(None, "--script", help="Script to run after the operation.")
ScriptParamOption = typer.Option(None, "--script-param", help="Parameter for --script.")
ScriptsOption = typer.Option(
    None, "--scripts", help='JSON list of {"name", "phase", "param"} script entries.'
)
MergeOption = typer.Option(False, "--merge", help="Include submitted fields in the output.")


# ── Commands ─────────────────────────────────────────────────────────────


@app.command("create")
def create(
    layout: str = typer.Argument(..., help="Layout to create the record on."),
    field: list[str] | None = FieldOption,
    script: str | None = ScriptOption,
    script_param: str | None = ScriptParamOption,
    scripts: str | None = ScriptsOption,
    merge: bool = MergeOption,
) -> None:
    """Create a record."""
    field_data = parse_fields(field)
    options = build_options(script=script, script_param=script_param, scripts=scripts, merge=merge)
    run_operation(lambda client: client.create(layout, field_data, options))


@app.command("edit")
def edit(
    layout: str = typer.Argument(..., help="Layout the record is on."),
    record_id: str = typer.Argument(..., help="recordId returned by create."),
    field: list[str] | None = FieldOption,
    script: str | None = ScriptOption,
    script_param: str | None = ScriptParamOption,
    scripts: str | None = ScriptsOption,
    merge: bool = MergeOption,
    mod_id: str | None = typer.Option(None, "--mod-id", help="Reject the edit if the record changed."),
) -> None:
    """Edit a record."""
    field_data = parse_fields(field)
    options = build_options(script=script, script_param=script_param, scripts=scripts, merge=merge)
    run_operation(lambda client: client.edit(layout, record_id, field_data, options, mod_id=mod_id))


@app.command("delete")
def delete(
    layout: str = typer.Argument(..., help="Layout the record is on."),
    record_id: str = typer.Argument(..., help="recordId to delete."),
    script: str | None = ScriptOption,
    script_param: str | None = ScriptParamOption,
    scripts: str | None = ScriptsOption,
    merge: bool = MergeOption,
) -> None:
    """Delete a record."""
    options = build_options(script=script, script_param=script_param, scripts=scripts, merge=merge)
    run_operation(lambda client: client.delete(layout, record_id, options))
