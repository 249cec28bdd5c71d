"""Root CLI group for kgmem with global flags and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from kgmem import __version__
from kgmem.commands import register_commands
from kgmem.commands._context import AppContext
from kgmem.config.settings import KgmemSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="kgmem")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logs.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "-f",
    "--memory-file",
    "memory_file",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Memory file to read and write (overrides config and env).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    memory_file: Path | None,
) -> None:
    """kgmem: persistent knowledge-graph memory."""
    ctx.ensure_object(dict)
    settings = KgmemSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        memory_file=memory_file.absolute() if memory_file else None,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
