"""serve: start the MCP server (requires the kgmem[mcp] extra)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from kgmem.commands._help import examples

if TYPE_CHECKING:
    from kgmem.commands._context import AppContext


@click.command(
    epilog=examples(
        """\
  kgmem serve
  kgmem serve --transport streamable-http --host 0.0.0.0 --port 9000
  kgmem --memory-file ~/notes/memory.jsonl serve"""
    ),
)
@click.option(
    "--transport",
    default=None,
    type=click.Choice(["stdio", "sse", "streamable-http"]),
    help="MCP transport protocol (default from [mcp] config, else stdio).",
)
@click.option("--host", default=None, help="Bind address (HTTP transports only).")
@click.option("--port", default=None, type=int, help="Listen port (HTTP transports only).")
@click.pass_obj
def serve(app: AppContext, transport: str | None, host: str | None, port: int | None) -> None:
    """Expose the graph store as MCP tools."""
    from kgmem.mcp.server import create_server, mcp_available

    if not mcp_available:
        click.echo("MCP not installed. Install with: pip install kgmem[mcp]", err=True)
        raise SystemExit(1)

    mcp_config = app.settings.mcp
    server = create_server(
        memory_path=app.settings.memory_path,
        host=host or mcp_config.host,
        port=port or mcp_config.port,
    )
    server.run(transport=transport or mcp_config.transport)
