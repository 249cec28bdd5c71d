"""Pydantic configuration sections with code-baked defaults.

Sparse TOML contract: defaults live here, ``kgmem.toml`` only holds
overrides. An empty (or absent) file is a valid configuration.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class StorageConfig(BaseModel):
    """[storage] section."""

    model_config = {"frozen": True}

    # Relative paths resolve against the settings root.
    file: str = "memory.jsonl"


class McpConfig(BaseModel):
    """[mcp] section."""

    model_config = {"frozen": True}

    transport: Literal["stdio", "sse", "streamable-http"] = "stdio"
    host: str = "127.0.0.1"
    port: int = 8000
