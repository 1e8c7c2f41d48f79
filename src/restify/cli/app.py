"""
Root Typer application for the restify CLI.

    restify -c shop.yaml collections
    restify -c shop.yaml fields User
    restify -c shop.yaml show
    restify -c shop.yaml ddl --columns
    restify -c shop.yaml sync --columns
    restify -c shop.yaml reset --yes
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table

from restify.cli.utils import console, handle_errors, load_service, print_json
from restify.core.config import CONFIG_ENV_VAR
from restify.core.logging import configure_logging

app = typer.Typer(
    name="restify",
    help="restify: declarative schemas mapped onto relational tables.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from restify import __version__

        typer.echo(f"restify {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        envvar=CONFIG_ENV_VAR,
        help="Config file (YAML or JSON).",
    ),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level."),
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """restify CLI: inspect a schema and provision its tables."""
    with handle_errors():
        configure_logging(level=log_level, json_format=False)
    ctx.obj = config


# ── Introspection ────────────────────────────────────────────────────────


@app.command()
def collections(
    ctx: typer.Context,
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """List collection names."""
    with handle_errors():
        names = load_service(ctx.obj).collections()
    if json_out:
        print_json(names)
        return
    for name in names:
        typer.echo(name)


@app.command()
def fields(
    ctx: typer.Context,
    collection: str = typer.Argument(..., help="Collection name"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """List the fields of one collection, derived inverse fields included."""
    with handle_errors():
        names = load_service(ctx.obj).fields(collection)
    if json_out:
        print_json(names)
        return
    for name in names:
        typer.echo(name)


@app.command()
def show(
    ctx: typer.Context,
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Show the resolved schema."""
    with handle_errors():
        schema = load_service(ctx.obj).schema

    if json_out:
        print_json(schema.to_dict())
        return

    for name, collection in schema.items():
        table = Table(title=name, show_lines=False)
        for column in ("Field", "Type", "Nullable", "Relation", "As", "Master"):
            table.add_column(column)
        for field_name, descriptor in collection.items():
            table.add_row(
                field_name,
                descriptor.type,
                "yes" if descriptor.nullable else "no",
                descriptor.relation.value if descriptor.relation else "",
                descriptor.as_ or "",
                "yes" if descriptor.master else "",
            )
        console.print(table)


# ── Table lifecycle ──────────────────────────────────────────────────────


@app.command()
def ddl(
    ctx: typer.Context,
    columns: bool = typer.Option(False, "--columns", help="Emit field columns and foreign keys"),
) -> None:
    """Print the statements ``sync`` would run, without connecting."""
    with handle_errors():
        statements = load_service(ctx.obj).statements_for_sync(with_columns=columns)
    for sql in statements:
        typer.echo(sql)


@app.command()
def sync(
    ctx: typer.Context,
    columns: bool = typer.Option(False, "--columns", help="Emit field columns and foreign keys"),
) -> None:
    """Create every collection's table (idempotent)."""
    with handle_errors():
        created = load_service(ctx.obj).sync(with_columns=columns)
    console.print(f"[green]Synced[/green] {len(created)} table(s)")


@app.command()
def reset(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Drop every table of the configured database."""
    with handle_errors():
        service = load_service(ctx.obj)
        if not yes:
            typer.confirm(f"Drop all tables in database {service.database!r}?", abort=True)
        dropped = service.reset()
    console.print(f"[yellow]Dropped[/yellow] {len(dropped)} table(s)")
