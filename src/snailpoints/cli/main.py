"""Snail Points CLI - headless access to counters and settings."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable

import click

from snailpoints.utils.logging import setup_logging


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.option("--api-base", default=None, help="Backend API base URL")
@click.pass_context
def cli(ctx: click.Context, debug: bool, json_output: bool, api_base: str | None) -> None:
    """Snail Points - reward counters from the command line."""
    from snailpoints.config import ClientConfig
    from snailpoints.exceptions import ConfigurationError

    try:
        config = ClientConfig.from_env(api_base=api_base)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["json_output"] = json_output
    setup_logging(
        level="DEBUG" if debug else config.log_level,
        json_output=json_output or config.json_logs,
    )


def _run(ctx: click.Context, fn: Callable[[Any], Awaitable[Any]]) -> Any:
    """Run *fn* with a signed-in shell and close everything afterwards."""
    from snailpoints.api.client import PointsApiClient
    from snailpoints.core.shell import AppShell
    from snailpoints.models.session import SessionMode

    async def main() -> Any:
        async with PointsApiClient(ctx.obj["config"]) as client:
            shell = AppShell(client)
            state = await shell.start()
            if state.mode is not SessionMode.AUTHENTICATED:
                raise click.ClickException(f"Not signed in (session: {state.mode})")
            try:
                return await fn(shell)
            finally:
                await shell.aclose()

    return asyncio.run(main())


def _echo_counters(ctx: click.Context, counters) -> None:
    if ctx.obj.get("json_output"):
        click.echo(json.dumps([c.model_dump() for c in counters], indent=2))
        return
    if not counters:
        click.echo("No counters.")
        return
    for idx, c in enumerate(counters):
        name = c.name if not c.is_unnamed else "(unnamed)"
        click.echo(f"  [{idx}] #{c.id:<5} {name:<24} {c.points:>6}")


def _lookup(counters, counter_id: int):
    from snailpoints.exceptions import UnknownCounterError

    if counters.get(counter_id) is None:
        raise click.ClickException(str(UnknownCounterError(counter_id)))


@cli.command()
@click.pass_context
def session(ctx: click.Context) -> None:
    """Show how the backend classifies the current session."""
    from snailpoints.api.client import PointsApiClient
    from snailpoints.core.session import SessionResolver

    async def main():
        async with PointsApiClient(ctx.obj["config"]) as client:
            return await SessionResolver(client).resolve()

    state = asyncio.run(main())
    if ctx.obj.get("json_output"):
        click.echo(json.dumps({"mode": str(state.mode), "admin": state.is_admin}))
    else:
        click.echo(f"Session: {state.mode}" + (" (admin)" if state.is_admin else ""))


@cli.command()
@click.option("--username", prompt=True)
@click.option("--password", prompt=True, hide_input=True)
@click.pass_context
def login(ctx: click.Context, username: str, password: str) -> None:
    """Log in and print the session token for SNAILPOINTS_SESSION_TOKEN."""
    from snailpoints.api.client import PointsApiClient
    from snailpoints.core.account import AccountService

    async def main():
        async with PointsApiClient(ctx.obj["config"]) as client:
            result = await AccountService(client).login(username, password)
            return result, client.session_token

    result, token = asyncio.run(main())
    if not result.success:
        raise click.ClickException(result.error or "Login failed")
    if ctx.obj.get("json_output"):
        click.echo(json.dumps({"session_token": token}))
    else:
        click.echo(f"export SNAILPOINTS_SESSION_TOKEN='{token or ''}'")


@cli.command(name="list")
@click.pass_context
def list_counters(ctx: click.Context) -> None:
    """List counters in order."""

    async def fn(shell):
        return await shell.counters.refresh()

    _echo_counters(ctx, _run(ctx, fn))


@cli.command()
@click.pass_context
def new(ctx: click.Context) -> None:
    """Create an unnamed counter."""

    async def fn(shell):
        created = await shell.counters.create()
        if created is None:
            raise click.ClickException("Backend did not create a counter")
        return created

    created = _run(ctx, fn)
    _echo_counters(ctx, [created])


def _scalar_command(op: str) -> Callable:
    """Build a coroutine that applies a scalar counter edit and waits for it."""

    def build(counter_id: int, *args: Any):
        async def fn(shell):
            counters = shell.counters
            await counters.refresh()
            _lookup(counters, counter_id)
            task = getattr(counters, op)(counter_id, *args)
            if task is None:
                raise click.ClickException(f"{op} refused for counter #{counter_id}")
            await counters.wait_idle()
            return counters.get(counter_id)

        return fn

    return build


@cli.command()
@click.argument("counter_id", type=int)
@click.argument("name")
@click.pass_context
def rename(ctx: click.Context, counter_id: int, name: str) -> None:
    """Rename a counter."""
    _echo_counters(ctx, [_run(ctx, _scalar_command("set_name")(counter_id, name))])


@cli.command(name="set")
@click.argument("counter_id", type=int)
@click.argument("points", type=int)
@click.pass_context
def set_points(ctx: click.Context, counter_id: int, points: int) -> None:
    """Set a counter's points."""
    _echo_counters(ctx, [_run(ctx, _scalar_command("set_points")(counter_id, points))])


@cli.command()
@click.argument("counter_id", type=int)
@click.pass_context
def inc(ctx: click.Context, counter_id: int) -> None:
    """Add one point."""
    _echo_counters(ctx, [_run(ctx, _scalar_command("increment")(counter_id))])


@cli.command()
@click.argument("counter_id", type=int)
@click.pass_context
def dec(ctx: click.Context, counter_id: int) -> None:
    """Remove one point."""
    _echo_counters(ctx, [_run(ctx, _scalar_command("decrement")(counter_id))])


@cli.command()
@click.argument("counter_id", type=int)
@click.pass_context
def redeem(ctx: click.Context, counter_id: int) -> None:
    """Redeem the configured cost from a counter."""
    _echo_counters(ctx, [_run(ctx, _scalar_command("redeem")(counter_id))])


@cli.command()
@click.argument("counter_id", type=int)
@click.confirmation_option(prompt="Delete this counter forever?")
@click.pass_context
def delete(ctx: click.Context, counter_id: int) -> None:
    """Delete a counter."""

    async def fn(shell):
        return await shell.counters.delete(counter_id)

    _echo_counters(ctx, _run(ctx, fn))


@cli.command()
@click.argument("counter_id", type=int)
@click.option("--up/--down", default=True, help="Direction in the sequence")
@click.pass_context
def move(ctx: click.Context, counter_id: int, up: bool) -> None:
    """Move a counter one place earlier (--up) or later (--down)."""

    async def fn(shell):
        counters = shell.counters
        await counters.refresh()
        _lookup(counters, counter_id)
        if not counters.can_move(counter_id, up):
            raise click.ClickException(
                f"Counter #{counter_id} is already {'first' if up else 'last'}"
            )
        return await counters.move(counter_id, up)

    _echo_counters(ctx, _run(ctx, fn))


@cli.command()
@click.pass_context
def settings(ctx: click.Context) -> None:
    """Show server-held settings."""

    async def fn(shell):
        return shell.settings.entries

    entries = _run(ctx, fn)
    if ctx.obj.get("json_output"):
        click.echo(json.dumps({k: e.model_dump() for k, e in entries.items()}, indent=2))
        return
    for key, entry in entries.items():
        click.echo(f"  {entry.formatted} ({key}, {entry.kind}): {entry.value}")


@cli.command(name="set-setting")
@click.argument("key")
@click.argument("value")
@click.pass_context
def set_setting(ctx: click.Context, key: str, value: str) -> None:
    """Update one setting; VALUE is coerced to the setting's type."""
    from snailpoints.models.settings import coerce_value
    from snailpoints.exceptions import UnknownSettingError

    async def fn(shell):
        holder = shell.settings
        try:
            entry = holder.get(key)
        except UnknownSettingError as exc:
            raise click.ClickException(str(exc)) from exc
        holder.update(key, coerce_value(entry.kind, value))
        await holder.wait_idle()
        return holder.get(key), holder.error_for(key)

    entry, error = _run(ctx, fn)
    if error:
        raise click.ClickException(error)
    click.echo(f"{entry.formatted}: {entry.value}")


@cli.command()
@click.option("--host", default=None, help="Bind address")
@click.option("--port", type=int, default=None, help="HTTP port")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Start the web dashboard."""
    import uvicorn
    from snailpoints.api.app import create_app

    config = ctx.obj["config"]
    app = create_app(config)
    uvicorn.run(app, host=host or config.ui_host, port=port or config.ui_port)


if __name__ == "__main__":
    cli()
