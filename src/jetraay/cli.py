"""
CLI entry point for Jetraay.

This module provides the Typer-based command-line interface for Jetraay.

Commands:
    new       Create a preset (records version 1)
    list      List saved presets
    show      Show one preset
    save      Edit a preset through the history-aware write path
    rename    Change a preset's name (not recorded in history)
    clone     Copy a preset under a new id
    delete    Delete a preset (its history is kept)
    history   List recorded versions, newest first
    revert    Restore a preset from a recorded version
    send      Send a preset through curl
    curl      Print a preset as a curl command

Architecture Note:
    The CLI parses arguments and delegates to
    PresetEngine for all storage work.
"""

import json
import traceback
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from jetraay import __version__
from jetraay.config import load_config
from jetraay.engine import PresetEngine
from jetraay.errors import ConfigError, JetraayError
from jetraay.executor import CurlExecutor, render_curl_command
from jetraay.observability import setup_logging
from jetraay.schema import JetraayConfig, Record

# Initialize Typer app with metadata
app = typer.Typer(
    name="jetraay",
    help="Save, version and send HTTP request presets.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for formatted output
console = Console()

HeaderOption = Annotated[
    Optional[list[str]],
    typer.Option(
        "--header",
        "-H",
        help="Header line 'Key: Value'. Repeat for several headers.",
    ),
]

JsonOption = Annotated[
    bool,
    typer.Option(
        "--json",
        help="Output results in JSON format.",
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]jetraay[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    data_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--data-dir",
            help="Directory holding the database. Defaults to the user data directory.",
            resolve_path=True,
        ),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="Path to a YAML configuration file.",
            exists=True,
            readable=True,
            resolve_path=True,
        ),
    ] = None,
    log_level: Annotated[
        Optional[str],
        typer.Option(
            "--log-level",
            help="Log level: debug, info, warning or error.",
        ),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug",
            help="Enable debug mode with full error tracebacks.",
        ),
    ] = False,
) -> None:
    """
    Jetraay - versioned local store for HTTP request presets.

    Every content change to a preset is kept as a numbered version that can
    be inspected and restored.
    """
    try:
        config = load_config(config_path, data_dir=data_dir, log_level=log_level)
    except ConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    sink = None
    if config.log_file is not None:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = config.log_file.open("a")
        ctx.call_on_close(sink.close)
    setup_logging(config.log_level, sink)

    ctx.obj = {"config": config, "debug": debug}


def _open_engine(ctx: typer.Context) -> PresetEngine:
    config: JetraayConfig = ctx.obj["config"]
    return PresetEngine(config)


def _fail(ctx: typer.Context, error: Exception, json_output: bool = False) -> None:
    """Report an error and exit with status 1."""
    if json_output:
        payload: dict[str, Any] = (
            error.to_dict()
            if isinstance(error, JetraayError)
            else {"error_type": type(error).__name__, "message": str(error)}
        )
        payload["error"] = True
        print(json.dumps(payload, indent=2, default=str))
    else:
        console.print(f"[red]{escape(str(error))}[/red]")
        if ctx.obj and ctx.obj.get("debug"):
            console.print(f"[dim]{traceback.format_exc()}[/dim]")
    raise typer.Exit(code=1)


def _display_record(record: Record) -> None:
    console.print(f"[bold]{escape(record.label)}[/bold]")
    console.print(f"  ID: [cyan]{escape(record.id)}[/cyan]")
    console.print(f"  Request: [bold]{escape(record.method)}[/bold] {escape(record.url)}")
    if record.headers:
        console.print("  Headers:")
        for header in record.headers:
            console.print(f"    {escape(header)}")
    if record.body is not None:
        console.print("  Body:")
        console.print(f"    {escape(record.body)}")


# =============================================================================
# Preset Commands
# =============================================================================


@app.command()
def new(
    ctx: typer.Context,
    method: Annotated[str, typer.Argument(help="HTTP method, e.g. GET.")],
    url: Annotated[str, typer.Argument(help="Request URL.")],
    header: HeaderOption = None,
    body: Annotated[
        Optional[str],
        typer.Option("--body", "-d", help="Request body."),
    ] = None,
    name: Annotated[
        Optional[str],
        typer.Option("--name", "-n", help="Display name."),
    ] = None,
) -> None:
    """
    Create a preset and record it as version 1.

    Example:
        $ jetraay new POST https://api.example.com/login -H "Content-Type: application/json" -d '{}'
    """
    try:
        with _open_engine(ctx) as engine:
            record_id = engine.create_record(method, url, headers=header or [], body=body, name=name)
    except (JetraayError, ValueError) as e:
        _fail(ctx, e)
    console.print(f"[green]✓[/green] Created [bold]{record_id}[/bold]")


@app.command("list")
def list_records(ctx: typer.Context, json_output: JsonOption = False) -> None:
    """
    List saved presets.

    Example:
        $ jetraay list
    """
    try:
        with _open_engine(ctx) as engine:
            records = engine.list_records()
    except JetraayError as e:
        _fail(ctx, e, json_output)

    if json_output:
        print(json.dumps([r.model_dump() for r in records], indent=2))
        return

    if not records:
        console.print("[dim]No presets found.[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Method", width=8)
    table.add_column("URL")
    table.add_column("Headers", justify="right")

    for record in records:
        table.add_row(
            escape(record.id),
            escape(record.name) if record.name else "[dim]-[/dim]",
            escape(record.method),
            escape(record.url),
            str(len(record.headers)),
        )

    console.print(table)


@app.command()
def show(
    ctx: typer.Context,
    record_id: Annotated[str, typer.Argument(help="The preset id.")],
    json_output: JsonOption = False,
) -> None:
    """Show one preset."""
    try:
        with _open_engine(ctx) as engine:
            record = engine.get_record(record_id)
    except JetraayError as e:
        _fail(ctx, e, json_output)

    if json_output:
        print(json.dumps(record.model_dump(), indent=2))
    else:
        _display_record(record)


@app.command()
def save(
    ctx: typer.Context,
    record_id: Annotated[str, typer.Argument(help="The preset id.")],
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="New display name.")] = None,
    no_name: Annotated[bool, typer.Option("--no-name", help="Remove the display name.")] = False,
    method: Annotated[Optional[str], typer.Option("--method", "-X", help="New HTTP method.")] = None,
    url: Annotated[Optional[str], typer.Option("--url", help="New URL.")] = None,
    header: HeaderOption = None,
    clear_headers: Annotated[
        bool,
        typer.Option("--clear-headers", help="Remove all headers."),
    ] = False,
    body: Annotated[Optional[str], typer.Option("--body", "-d", help="New body.")] = None,
    no_body: Annotated[bool, typer.Option("--no-body", help="Remove the body.")] = False,
) -> None:
    """
    Edit a preset. A new version is recorded only if its content changed.

    --header replaces the whole header list.

    Example:
        $ jetraay save 5b1e... -d '{"user": "admin"}'
    """
    try:
        with _open_engine(ctx) as engine:
            current = engine.get_record(record_id)
            update: dict[str, Any] = {}
            if no_name:
                update["name"] = None
            elif name is not None:
                update["name"] = name
            if method is not None:
                update["method"] = method
            if url is not None:
                update["url"] = url
            if clear_headers:
                update["headers"] = []
            elif header:
                update["headers"] = list(header)
            if no_body:
                update["body"] = None
            elif body is not None:
                update["body"] = body

            proposed = Record.model_validate({**current.model_dump(), **update})
            version = engine.save_with_history(proposed)
    except (JetraayError, ValueError) as e:
        _fail(ctx, e)

    if version is None:
        console.print("[green]✓[/green] Saved [dim](no content change, history unchanged)[/dim]")
    else:
        console.print(f"[green]✓[/green] Saved as version [bold]{version}[/bold]")


@app.command()
def rename(
    ctx: typer.Context,
    record_id: Annotated[str, typer.Argument(help="The preset id.")],
    new_name: Annotated[str, typer.Argument(help="New display name.")],
) -> None:
    """Rename a preset. Renames are not recorded in history."""
    try:
        with _open_engine(ctx) as engine:
            engine.rename_record(record_id, new_name)
    except JetraayError as e:
        _fail(ctx, e)
    console.print(f"[green]✓[/green] Renamed to [bold]{escape(new_name)}[/bold]")


@app.command()
def clone(
    ctx: typer.Context,
    record_id: Annotated[str, typer.Argument(help="The preset id.")],
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="Name for the copy.")] = None,
) -> None:
    """Copy a preset under a new id with its own history."""
    try:
        with _open_engine(ctx) as engine:
            new_id = engine.clone_record(record_id, name=name)
    except JetraayError as e:
        _fail(ctx, e)
    console.print(f"[green]✓[/green] Cloned to [bold]{new_id}[/bold]")


@app.command()
def delete(
    ctx: typer.Context,
    record_id: Annotated[str, typer.Argument(help="The preset id.")],
) -> None:
    """Delete a preset. Its history is kept and can still be reverted to."""
    try:
        with _open_engine(ctx) as engine:
            removed = engine.delete_record(record_id)
    except JetraayError as e:
        _fail(ctx, e)
    if removed:
        console.print(f"[green]✓[/green] Deleted [bold]{escape(record_id)}[/bold]")
    else:
        console.print(f"[dim]Nothing to delete for {escape(record_id)}[/dim]")


# =============================================================================
# History Commands
# =============================================================================


@app.command()
def history(
    ctx: typer.Context,
    record_id: Annotated[str, typer.Argument(help="The preset id.")],
    json_output: JsonOption = False,
) -> None:
    """
    List recorded versions of a preset, newest first.

    Example:
        $ jetraay history 5b1e...
    """
    try:
        with _open_engine(ctx) as engine:
            entries = engine.list_history(record_id)
    except JetraayError as e:
        _fail(ctx, e, json_output)

    if json_output:
        print(json.dumps([entry.to_dict() for entry in entries], indent=2))
        return

    if not entries:
        console.print(f"[dim]No history for {escape(record_id)}.[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Version", justify="right", style="cyan")
    table.add_column("Recorded")
    table.add_column("Method", width=8)
    table.add_column("URL")
    table.add_column("Body")

    for entry in entries:
        snapshot = entry.snapshot
        if snapshot.body is None:
            body_display = "[dim]-[/dim]"
        elif len(snapshot.body) > 40:
            body_display = escape(snapshot.body[:37] + "...")
        else:
            body_display = escape(snapshot.body)
        table.add_row(
            str(entry.version),
            entry.timestamp.isoformat()[:19],  # Truncate to seconds
            escape(snapshot.method),
            escape(snapshot.url),
            body_display,
        )

    console.print(table)


@app.command()
def revert(
    ctx: typer.Context,
    record_id: Annotated[str, typer.Argument(help="The preset id.")],
    version: Annotated[int, typer.Argument(help="Version to restore.", min=1)],
) -> None:
    """
    Restore a preset from a recorded version.

    The revert itself is not recorded; a deleted preset is brought back.

    Example:
        $ jetraay revert 5b1e... 1
    """
    try:
        with _open_engine(ctx) as engine:
            record = engine.revert_to_version(record_id, version)
    except JetraayError as e:
        _fail(ctx, e)
    console.print(f"[green]✓[/green] Reverted [bold]{escape(record.label)}[/bold] to version {version}")


# =============================================================================
# Execution Commands
# =============================================================================


@app.command()
def send(
    ctx: typer.Context,
    record_id: Annotated[str, typer.Argument(help="The preset id.")],
    curl_binary: Annotated[
        str,
        typer.Option("--curl", help="curl executable to run."),
    ] = "curl",
    timeout: Annotated[
        float,
        typer.Option("--timeout", help="Seconds before the request is killed.", min=0.1),
    ] = 60.0,
) -> None:
    """
    Send a preset through curl and print the response.

    Example:
        $ jetraay send 5b1e...
    """
    try:
        with _open_engine(ctx) as engine:
            output = engine.send(record_id, CurlExecutor(binary=curl_binary, timeout_seconds=timeout))
            response = output.unwrap()
    except JetraayError as e:
        _fail(ctx, e)
    print(response, end="")


@app.command("curl")
def as_curl(
    ctx: typer.Context,
    record_id: Annotated[str, typer.Argument(help="The preset id.")],
) -> None:
    """Print a preset as a curl command line."""
    try:
        with _open_engine(ctx) as engine:
            record = engine.get_record(record_id)
    except JetraayError as e:
        _fail(ctx, e)
    print(render_curl_command(record))
