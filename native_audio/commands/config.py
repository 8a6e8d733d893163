"""Settings commands for the native-audio CLI."""

from __future__ import annotations

import click
import yaml
from pydantic import ValidationError

from ..console import console
from ..settings import AudioConfig
from ..settings import get_settings
from ..utils.error_format import escape_markup

SCOPES = ["local", "project", "global"]


@click.group(invoke_without_command=True)
@click.pass_context
def config(ctx: click.Context):
    """Inspect and change audio settings.

    Settings are read from ~/.native-audio/settings.yaml (global),
    .native-audio/settings.yaml (project) and
    .native-audio/settings.local.yaml (local).
    """
    if ctx.invoked_subcommand is None:
        click.echo("\n" + ctx.get_help())
        ctx.exit()


@config.command(name="show")
def config_show():
    """Show the effective audio configuration."""
    settings = get_settings()
    try:
        effective = settings.get_audio_config()
    except (ValidationError, ValueError) as e:
        console.print(f"[red]Invalid audio settings:[/red] {escape_markup(e)}")
        raise click.exceptions.Exit(1) from e

    console.print("[bold]Audio settings[/bold]")
    console.print(f"  extensions:          {', '.join(sorted(effective.extensions))}")
    console.print(f"  max_bytes:           {effective.max_bytes if effective.max_bytes is not None else 'unlimited'}")
    console.print(f"  sandbox_root:        {escape_markup(effective.sandbox_root or '(none)')}")
    console.print(f"  image_implies_audio: {effective.image_implies_audio}")
    console.print(f"  max_concurrency:     {effective.max_concurrency}")


@config.command(name="set")
@click.argument("key", type=click.Choice(sorted(AudioConfig.model_fields)))
@click.argument("value")
@click.option("--scope", type=click.Choice(SCOPES), default="global", help="Settings scope to write")
def config_set(key: str, value: str, scope: str):
    """Set an audio option (VALUE is parsed as YAML)."""
    parsed = yaml.safe_load(value)
    try:
        get_settings().set_audio_option(key, parsed, scope=scope)  # type: ignore[arg-type]
    except (ValidationError, ValueError) as e:
        console.print(f"[red]Invalid value for {key}:[/red] {escape_markup(e)}")
        raise click.exceptions.Exit(1) from e
    console.print(f"[green]✓ Set {key} = {escape_markup(parsed)} ({scope})[/green]")


@config.command(name="unset")
@click.argument("key", type=click.Choice(sorted(AudioConfig.model_fields)))
@click.option("--scope", type=click.Choice(SCOPES), default="global", help="Settings scope to modify")
def config_unset(key: str, scope: str):
    """Remove an audio option from a scope."""
    if get_settings().clear_audio_option(key, scope=scope):  # type: ignore[arg-type]
        console.print(f"[green]✓ Removed {key} ({scope})[/green]")
    else:
        console.print(f"[yellow]{key} is not set in {scope} scope[/yellow]")
