"""``micropress`` command line entry point."""

from __future__ import annotations

from pathlib import Path

import click

from micropress import __version__
from micropress.commands import register_commands
from micropress.commands._context import AppContext
from micropress.config.settings import MicropressSettings


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name="micropress")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Config file (default: micropress.toml found from the site root upwards).",
)
@click.option(
    "--site-root",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory posts and media are written under.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log at DEBUG level.")
@click.option("--log-json", is_flag=True, help="Log JSON lines to stderr.")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    site_root: Path | None,
    verbose: bool,
    log_json: bool,
) -> None:
    """Micropub endpoint that publishes to a static site's markdown files."""
    settings = MicropressSettings.from_cli(
        config_path=config_path,
        site_root=site_root,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
