"""CLI for Kite API - query and configure the local Kite daemon."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable

import click

from kite_api import __version__
from kite_api.errors import KiteAPIError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _run(ctx: click.Context, operation: Callable[[Any], Awaitable[Any]]) -> Any:
    """Run an async facade operation against a fresh KiteAPI."""
    from kite_api.api import KiteAPI
    from kite_api.config import Settings

    overrides = {k: v for k, v in (ctx.obj or {}).items() if v is not None}

    async def runner() -> Any:
        api = KiteAPI(settings=Settings(**overrides))
        try:
            return await operation(api)
        finally:
            await api.aclose()

    try:
        return asyncio.run(runner())
    except KiteAPIError as e:
        raise click.ClickException(e.message) from e


def _run_config(ctx: click.Context, operation: Callable[[Any], Awaitable[Any]]) -> Any:
    """Like _run, also reporting malformed or mistyped config content."""
    try:
        return _run(ctx, operation)
    except (ValueError, TypeError) as e:
        raise click.ClickException(f"Invalid editor config: {e}") from e


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


@click.group()
@click.version_option(version=__version__, prog_name="kite-api")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option(
    "--store",
    type=click.Choice(["memory", "file", "local"]),
    default=None,
    help="Editor config backend (defaults to KITE_STORE or memory)",
)
@click.option("--port", type=int, default=None, help="Daemon port (defaults to KITE_PORT)")
@click.pass_context
def main(ctx: click.Context, verbose: bool, store: str | None, port: int | None) -> None:
    """Kite API - talk to the local Kite daemon from the command line.

    Check daemon health, manage whitelisted paths, and query hover or
    completion data for a file.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )
    ctx.ensure_object(dict)
    ctx.obj.update({"store": store, "port": port, "request_debug": verbose or None})


@main.command()
@click.pass_context
def health(ctx: click.Context) -> None:
    """Show how far the daemon can be reached."""
    state = _run(ctx, lambda api: api.check_health())
    click.echo(f"Kite daemon: {getattr(state, 'value', state)}")


@main.command()
@click.argument("filename", required=False, default="")
@click.pass_context
def status(ctx: click.Context, filename: str) -> None:
    """Show the daemon's indexing status for FILENAME."""
    data = _run(ctx, lambda api: api.get_status(filename))
    click.echo(data.get("status", "ready"))


@main.command()
@click.option("--email", prompt=True, help="Account email")
@click.option("--password", prompt=True, hide_input=True, help="Account password")
@click.pass_context
def login(ctx: click.Context, email: str, password: str) -> None:
    """Log into the daemon and remember the user id."""
    _run(ctx, lambda api: api.authenticate_user(email, password))
    click.echo(f"Logged in as {email}")


@main.command()
@click.argument("path", type=click.Path(resolve_path=True))
@click.pass_context
def whitelist(ctx: click.Context, path: str) -> None:
    """Allow the daemon to index the project containing PATH."""
    _run(ctx, lambda api: api.whitelist_path(path))
    click.echo(f"Whitelisted project for {path}")


@main.command()
@click.argument("path", type=click.Path(resolve_path=True))
@click.option("--no-action", is_flag=True, help="Record a dismissed prompt rather than a refusal")
@click.pass_context
def blacklist(ctx: click.Context, path: str, no_action: bool) -> None:
    """Prevent the daemon from offering to index PATH again."""
    _run(ctx, lambda api: api.blacklist_path(path, no_action))
    click.echo(f"Blacklisted {path}")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("--position", "-p", type=int, required=True, help="Cursor offset in characters")
@click.pass_context
def hover(ctx: click.Context, file: str, position: int) -> None:
    """Show hover data at POSITION in FILE."""
    source = Path(file).read_text(encoding="utf-8")
    data = _run(ctx, lambda api: api.get_hover_data_at_position(file, source, position))
    _echo_json(data)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("--position", "-p", type=int, required=True, help="Cursor offset in characters")
@click.option("--raw", is_flag=True, help="Output raw JSON instead of formatted text")
@click.pass_context
def completions(ctx: click.Context, file: str, position: int, raw: bool) -> None:
    """List completions at POSITION in FILE."""
    source = Path(file).read_text(encoding="utf-8")
    items = _run(ctx, lambda api: api.get_completions_at_position(file, source, position))

    if raw:
        _echo_json(items)
        return

    if not items:
        click.echo("No completions.")
        return
    for item in items:
        display = item.get("display", item.get("insert", "")) if isinstance(item, dict) else item
        hint = item.get("hint", "") if isinstance(item, dict) else ""
        click.echo(f"  {display}  {hint}".rstrip())


@main.group()
def config() -> None:
    """Read and write the persistent editor config."""
    pass


@config.command("get")
@click.argument("path", required=False, default="")
@click.pass_context
def config_get(ctx: click.Context, path: str) -> None:
    """Print the value at dotted PATH (the whole config when omitted)."""
    value = _run_config(ctx, lambda api: api.editor_config.get(path))
    _echo_json(value)


@config.command("set")
@click.argument("path")
@click.argument("value")
@click.pass_context
def config_set(ctx: click.Context, path: str, value: str) -> None:
    """Set dotted PATH to VALUE (parsed as JSON, else kept as a string).

    \b
    Example:
        kite-api --store file config set editor.theme '"dark"'
        kite-api --store file config set features.hover true
    """
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value

    _run_config(ctx, lambda api: api.editor_config.set(path, parsed))
    click.echo(f"Set {path}")


if __name__ == "__main__":
    main()
