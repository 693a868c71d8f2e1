"""Click commands reading and updating module settings through the cache."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import click

from deckcache.app import DeckCacheApp
from deckcache.config import load_config
from deckcache.errors import DeckCacheError
from deckcache.models.deckhouse import ModuleConfig
from deckcache.resources import deckhouse
from deckcache.transport import Transport

T = TypeVar("T")


def _run(ctx: click.Context, body: Callable[[DeckCacheApp], Awaitable[T]]) -> T:
    """Start an app, run *body* against it and stop the app again."""

    async def _main() -> T:
        app = DeckCacheApp(
            config=ctx.obj.get("config"),
            transport=ctx.obj.get("transport"),
            json_logs=False,
            configure_logging=ctx.obj.get("configure_logging", True),
        )
        await app.start()
        try:
            return await body(app)
        finally:
            await app.stop()

    try:
        return asyncio.run(_main())
    except DeckCacheError as exc:
        raise click.ClickException(str(exc)) from exc


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, sort_keys=True))


@click.group()
@click.option("--log-level", type=click.Choice(["debug", "info", "warning", "error"]), default=None)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """Inspect and update Deckhouse module settings."""
    ctx.ensure_object(dict)
    if "config" not in ctx.obj:
        try:
            ctx.obj["config"] = load_config()
        except DeckCacheError as exc:
            raise click.ClickException(str(exc)) from exc
    if log_level is not None:
        ctx.obj["config"].log.level = log_level


@cli.command("types")
@click.pass_context
def list_types(ctx: click.Context) -> None:
    """List registered resource types and their verbs."""

    async def _body(app: DeckCacheApp) -> list[dict[str, Any]]:
        assert app.registry is not None
        rows = []
        for name in app.registry.names():
            rtype = app.registry.get(name)
            rows.append(
                {
                    "name": name,
                    "route": rtype.route,
                    "verbs": {verb: str(cfg.http_method) for verb, cfg in rtype.verbs.items()},
                    "dynamic_cache": rtype.cache_policy.dynamic_cache,
                }
            )
        return rows

    _echo_json(_run(ctx, _body))


@cli.command()
@click.argument("uid")
@click.pass_context
def show(ctx: click.Context, uid: str) -> None:
    """Print the deckhouse module settings cached under UID."""

    async def _body(app: DeckCacheApp) -> dict[str, Any]:
        assert app.cache is not None
        resource = await app.cache.get_or_fetch(deckhouse.NAME, uid)
        return resource.to_wire()

    _echo_json(_run(ctx, _body))


@cli.command("set-release-channel")
@click.argument("uid")
@click.argument("channel")
@click.pass_context
def set_release_channel(ctx: click.Context, uid: str, channel: str) -> None:
    """Change the release channel of the deckhouse module and save it."""

    async def _body(app: DeckCacheApp) -> str | None:
        assert app.cache is not None
        resource = await app.cache.get_or_fetch(deckhouse.NAME, uid)
        model: ModuleConfig = resource.model
        previous = model.settings.release_channel
        model.settings.release_channel = channel
        await resource.save()
        return previous

    previous = _run(ctx, _body)
    click.echo(f"releaseChannel: {previous or '<unset>'} -> {channel}")


def main(transport: Transport | None = None) -> None:
    """Console-script entry point."""
    cli(obj={"transport": transport}, prog_name="deckcache")
