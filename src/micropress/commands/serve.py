"""serve — run the Micropub endpoint under uvicorn."""

from __future__ import annotations

import click

from micropress.commands._context import AppContext
from micropress.commands._examples import examples_option


@click.command()
@examples_option(
    """\
  # Serve the site in the current directory on the configured port (8080)
  micropress serve

  # Listen on all interfaces, port 9000
  micropress serve --host 0.0.0.0 --port 9000

  # Use an explicit config file
  micropress --config /srv/blog/micropress.toml serve"""
)
@click.option("--host", default=None, help="Bind address (default: [server] host).")
@click.option("--port", default=None, type=int, help="Listen port (default: [server] port).")
@click.pass_obj
def serve(ctx: AppContext, host: str | None, port: int | None) -> None:
    """Run the Micropub endpoint."""
    import uvicorn

    server = ctx.settings.server
    uvicorn.run(
        ctx.asgi_app(),
        host=host or server.host,
        port=port or server.port,
        log_config=None,
    )
