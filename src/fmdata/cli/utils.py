"""
CLI utility helpers: argument parsing, client construction, output.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any

import typer
from rich.console import Console

from fmdata.client import FileMakerClient
from fmdata.core.errors import FMDataError, ServerError
from fmdata.core.logging import get_logger
from fmdata.core.settings import get_settings

console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)


# ── Argument parsing ─────────────────────────────────────────────────────


def parse_value(raw: str) -> Any:
    """JSON when it parses (numbers, lists, objects), the raw text otherwise."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def parse_fields(pairs: list[str] | None) -> dict[str, Any]:
    """Turn repeated ``key=value`` options into field data."""
    fields: dict[str, Any] = {}
    for pair in pairs or []:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got {pair!r}", param_hint="--field")
        fields[key] = parse_value(raw)
    return fields


def build_options(
    *,
    script: str | None = None,
    script_param: str | None = None,
    scripts: str | None = None,
    merge: bool = False,
) -> dict[str, Any]:
    options: dict[str, Any] = {}
    if merge:
        options["merge"] = True
    if script is not None:
        options["script"] = script
    if script_param is not None:
        options["script.param"] = parse_value(script_param)
    if scripts is not None:
        try:
            options["scripts"] = json.loads(scripts)
        except ValueError as exc:
            raise typer.BadParameter(f"Not valid JSON: {exc}", param_hint="--scripts") from exc
    return options


# ── Client + output ──────────────────────────────────────────────────────


def make_client() -> FileMakerClient:
    """Client configured from ``FILEMAKER_*`` environment variables."""
    return FileMakerClient(get_settings())


def run_operation(call: Callable[[FileMakerClient], Awaitable[dict[str, Any]]]) -> None:
    """Run one client call, print the result as JSON, map errors to exit codes."""

    async def _run() -> dict[str, Any]:
        async with make_client() as client:
            return await call(client)

    try:
        result = asyncio.run(_run())
    except FMDataError as exc:
        logger.debug("command_failed", **exc.to_dict())
        if isinstance(exc, ServerError):
            err_console.print(f"[bold red]Error[/bold red] ({exc.code}): {exc.message}")
            raise typer.Exit(code=1) from exc
        err_console.print(f"[bold red]Error[/bold red] ({exc.category.value}): {exc.message}")
        raise typer.Exit(code=2) from exc

    console.print_json(json.dumps(result, default=str))
