"""FastMCP server setup.

Optional extra: guarded behind try/except ImportError.
Transport: stdio default, SSE and streamable HTTP optional.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

mcp_available = False
_FastMCP: Any = None

try:
    from mcp.server.fastmcp import FastMCP as _FastMCP  # type: ignore[no-redef,import-not-found]

    mcp_available = True
except ImportError:
    pass

__all__ = ["create_server", "mcp_available"]


def create_server(
    *,
    memory_path: Path | None = None,
    host: str = "127.0.0.1",
    port: int = 8000,
) -> Any:
    """Create and configure the MCP server.

    Builds a GraphStore over *memory_path* (default: resolved from
    settings, i.e. ``kgmem.toml``/env/CWD) and registers all tools.
    Returns the FastMCP instance.

    *host* and *port* configure the bind address for HTTP transports
    (sse, streamable-http). They are ignored when using stdio.

    Raises RuntimeError if the mcp extra is not installed.
    """
    if not mcp_available or _FastMCP is None:
        msg = "MCP extra not installed. Install with: pip install kgmem[mcp]"
        raise RuntimeError(msg)

    from kgmem.config.settings import KgmemSettings
    from kgmem.mcp.tools import register_tools
    from kgmem.services.store import GraphStore

    if memory_path is None:
        memory_path = KgmemSettings.from_cli().memory_path
    store = GraphStore.from_path(memory_path)

    server = _FastMCP("kgmem", host=host, port=port)
    register_tools(server, store)
    return server
