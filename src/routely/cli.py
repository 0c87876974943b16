"""routely command-line interface powered by Typer."""

import os
from pathlib import Path
from typing import Annotated

import typer

from routely.errors import RouterError
from routely.routing import RouteTable
from routely.verbs import Verb

app = typer.Typer(name="routely", add_completion=False, no_args_is_help=True)

ConfigArg = Annotated[Path, typer.Argument(help="TOML route file.")]


# ------------------------------------------------------------------
# Table loading
# ------------------------------------------------------------------


def _load(config: Path) -> RouteTable:
    """Load and build the table, turning build failures into a clean exit."""
    from routely.config import load_table

    if not config.exists():
        typer.echo(f"Error: file {str(config)!r} not found.", err=True)
        raise typer.Exit(1)
    try:
        return load_table(config)
    except (RouterError, TypeError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc


def _handler_name(handler: object) -> str:
    module = getattr(handler, "__module__", None)
    name = getattr(handler, "__qualname__", None) or repr(handler)
    return f"{module}:{name}" if module else name


# ------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------


@app.command()
def routes(config: ConfigArg) -> None:
    """List routes in the order they are evaluated."""
    table = _load(config)
    width = max((len(r.verb.value) for r in table), default=0)
    for index, route in enumerate(table):
        typer.echo(f"{index:>3}  {route.verb.value:<{width}}  {route.pattern}  -> {_handler_name(route.handler)}")
    typer.echo(f"  *  {'':<{width}}  <fallback>  -> {_handler_name(table.fallback)}")


@app.command()
def match(
    config: ConfigArg,
    verb: Annotated[str, typer.Argument(help="HTTP verb, e.g. GET.")],
    path: Annotated[str, typer.Argument(help="Request path, e.g. /users/42.")],
) -> None:
    """Show which route would handle a request, without calling it."""
    table = _load(config)
    try:
        parsed = Verb.parse(verb)
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc

    result = table.resolve(parsed, path)
    if result is None:
        typer.echo(f"fallback  -> {_handler_name(table.fallback)}")
        return
    typer.echo(f"{result.route.verb.value} {result.route.pattern}  -> {_handler_name(result.route.handler)}")
    for name, value in result.params.items():
        typer.echo(f"  {name} = {value!r}")


@app.command()
def serve(
    config: ConfigArg,
    host: Annotated[str, typer.Option(help="Bind address.")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Bind port.")] = 8000,
    workers: Annotated[int, typer.Option(help="Number of worker processes.")] = 1,
    reload: Annotated[bool, typer.Option("--reload/--no-reload", help="Auto-reload on code changes.")] = False,
) -> None:
    """Serve a route file over ASGI with Granian."""
    from routely._server import CONFIG_ENV, serve as granian_serve

    # Fail fast here rather than inside every worker.
    _load(config)
    os.environ[CONFIG_ENV] = str(config.resolve())
    granian_serve(
        "routely._server:config_app",
        host=host,
        port=port,
        workers=workers,
        reload=reload,
        factory=True,
    )
