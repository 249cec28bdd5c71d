"""AppContext: shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Builds the store lazily, runs service coroutines,
and centralizes result emission (stdout/stderr routing and exit codes).
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import click

from kgmem.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from collections.abc import Coroutine
    from typing import Any

    from kgmem.config.settings import KgmemSettings
    from kgmem.services.graph import GraphService
    from kgmem.services.result import ServiceResult
    from kgmem.services.store import GraphStore


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The store is created on first use so ``--help`` and ``--version``
    never touch the memory file.
    """

    def __init__(self, settings: KgmemSettings) -> None:
        self.settings = settings
        self._store: GraphStore | None = None

        from kgmem.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def store(self) -> GraphStore:
        """The graph store for the resolved memory file."""
        if self._store is None:
            from kgmem.services.store import GraphStore

            self._store = GraphStore.from_path(self.settings.memory_path)
        return self._store

    @property
    def service(self) -> GraphService:
        from kgmem.services.graph import GraphService

        return GraphService(self.store)

    def run(self, coro: Coroutine[Any, Any, ServiceResult]) -> None:
        """Drive one service coroutine to completion and emit its result."""
        self.emit(asyncio.run(coro))

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if not result.ok:
            click.echo(output, err=True)
            raise SystemExit(1)
        click.echo(output)
