"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs (CLI flags passed by Click)
  2. Env vars (``KGMEM_*`` prefix, plus legacy ``MEMORY_FILE_PATH``)
  3. TOML file (``kgmem.toml`` discovered via walk-up)
  4. Code defaults (baked into the section models)
"""

from __future__ import annotations

import os
import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from kgmem.config.models import McpConfig, StorageConfig

CONFIG_FILENAME = "kgmem.toml"
CONFIG_ENV_VAR = "KGMEM_CONFIG"


def _locate_config(config_path: str | None, start: Path | None) -> Path | None:
    """Pick the TOML file in effect for one invocation.

    ``--config`` wins over ``KGMEM_CONFIG``; whichever is given must name an
    existing file, otherwise no config is used. Without either, the nearest
    ``kgmem.toml`` at or above *start* (default: CWD) is used, the way git
    finds ``.git``.
    """
    explicit = config_path or os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        path = Path(explicit).expanduser()
        return path if path.is_file() else None
    here = (start or Path.cwd()).resolve()
    candidates = (directory / CONFIG_FILENAME for directory in (here, *here.parents))
    return next((c for c in candidates if c.is_file()), None)


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Expose the sections of the located ``kgmem.toml`` as a settings source."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class KgmemSettings(BaseSettings):
    """Settings for the kgmem CLI and MCP server.

    Attributes:
        root: Directory relative memory paths resolve against (parent of
            ``kgmem.toml``, or CWD if no config found).
        config_path: The TOML file in effect, if any.
        memory_file: Explicit memory file override; wins over
            ``storage.file``.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "KGMEM_",
        "env_nested_delimiter": "__",
        "populate_by_name": True,
    }

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None
    memory_file: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("memory_file", "KGMEM_MEMORY_FILE", "MEMORY_FILE_PATH"),
    )

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    storage: StorageConfig = Field(default_factory=StorageConfig)
    mcp: McpConfig = Field(default_factory=McpConfig)

    @property
    def memory_path(self) -> Path:
        """Resolved location of the memory file."""
        path = self.memory_file if self.memory_file is not None else Path(self.storage.file)
        path = path.expanduser()
        if path.is_absolute():
            return path
        return self.root / path

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> KgmemSettings:
        """Construct settings from a CLI (or server) invocation.

        Locates the TOML file (see :func:`_locate_config`), takes *root*
        from its parent directory, and merges CLI flags as highest-priority
        overrides. Flags passed as None are dropped so lower-priority
        sources still apply.
        """
        toml_path = _locate_config(config_path, root)
        resolved_root = root or (toml_path.parent if toml_path else Path.cwd())

        overrides = {k: v for k, v in cli_flags.items() if v is not None}

        _tls.toml_path = toml_path
        try:
            return cls(
                root=resolved_root,
                config_path=toml_path,
                **overrides,
            )
        finally:
            _tls.toml_path = None
