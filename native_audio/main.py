"""native-audio command line interface."""

from __future__ import annotations

import asyncio
import base64
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.table import Table

from .commands.config import config as config_group
from .console import console
from .console import err_console
from .lib.audio_loading import AudioPipeline
from .lib.audio_loading import ModelDescriptor
from .logging_setup import init_json_logging
from .settings import get_settings
from .utils.error_format import escape_markup


def _read_prompt(prompt: str) -> str:
    """Read the prompt argument, or stdin when it is '-'."""
    if prompt == "-":
        return sys.stdin.read()
    return prompt


def _load_config(ctx: click.Context, **overrides):
    try:
        base = get_settings().get_audio_config()
    except (ValidationError, ValueError) as e:
        err_console.print(f"[red]Invalid audio settings:[/red] {escape_markup(e)}")
        ctx.exit(1)
    updates = {key: value for key, value in overrides.items() if value is not None}
    return base.model_copy(update=updates) if updates else base


@click.group()
@click.version_option(package_name="native-audio")
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Write JSONL diagnostics to this file")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level for --log-file (default: NATIVE_AUDIO_LOG_LEVEL or INFO)",
)
def cli(log_file: str | None, log_level: str | None):
    """native-audio - find and load audio files referenced in prompts."""
    if log_file:
        init_json_logging(log_file, log_level)


@cli.command()
@click.argument("prompt")
@click.pass_context
def detect(ctx: click.Context, prompt: str):
    """List audio references found in PROMPT ('-' reads stdin)."""
    pipeline = AudioPipeline(_load_config(ctx))
    refs = pipeline.detect(_read_prompt(prompt))

    if not refs:
        console.print("[dim]No audio references found[/dim]")
        return

    table = Table(title=f"Audio references ({len(refs)})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Raw", style="cyan")
    table.add_column("Kind")
    table.add_column("Resolved", style="green")
    for index, ref in enumerate(refs, start=1):
        table.add_row(str(index), escape_markup(ref.raw), ref.kind.value, escape_markup(ref.resolved))
    console.print(table)


@cli.command()
@click.argument("prompt")
@click.option(
    "--workspace",
    "-w",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Base directory for relative paths (default: current directory)",
)
@click.option(
    "--sandbox-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Only load files inside this directory",
)
@click.option("--max-bytes", type=click.IntRange(min=1), default=None, help="Per-file size cap in bytes")
@click.option(
    "--model-input",
    "-m",
    "model_inputs",
    multiple=True,
    default=("audio",),
    show_default=True,
    help="Input modality the target model declares (repeatable)",
)
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_context
def load(
    ctx: click.Context,
    prompt: str,
    workspace: Path | None,
    sandbox_root: Path | None,
    max_bytes: int | None,
    model_inputs: tuple[str, ...],
    as_json: bool,
):
    """Detect and load audio referenced in PROMPT ('-' reads stdin)."""
    pipeline = AudioPipeline(_load_config(ctx, sandbox_root=sandbox_root, max_bytes=max_bytes))
    model = ModelDescriptor(input=list(model_inputs))
    workspace_dir = workspace or Path.cwd()

    result = asyncio.run(pipeline.run(_read_prompt(prompt), workspace_dir, model))

    if as_json:
        click.echo(result.model_dump_json(by_alias=True, indent=2))
        return

    if not pipeline.supports(model):
        inputs = escape_markup(list(model_inputs))
        err_console.print(f"[yellow]Model input {inputs} does not accept audio; nothing loaded[/yellow]")

    console.print(f"Loaded: [green]{result.loaded_count}[/green]  Skipped: [yellow]{result.skipped_count}[/yellow]")
    if not result.audio:
        return

    table = Table()
    table.add_column("#", justify="right", style="dim")
    table.add_column("MIME type", style="cyan")
    table.add_column("Bytes", justify="right")
    for index, item in enumerate(result.audio, start=1):
        table.add_row(str(index), item.mime_type, str(len(base64.b64decode(item.data))))
    console.print(table)


cli.add_command(config_group)


def main():
    """Entry point for the native-audio console script."""
    cli()


if __name__ == "__main__":
    main()
