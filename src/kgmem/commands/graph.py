"""Read commands: read, search, open."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from kgmem.commands._help import examples

if TYPE_CHECKING:
    from kgmem.commands._context import AppContext


@click.command(
    epilog=examples(
        """\
  kgmem read
  kgmem --json read"""
    ),
)
@click.pass_obj
def read(app: AppContext) -> None:
    """Print the entire knowledge graph."""
    app.run(app.service.read_graph())


@click.command(
    epilog=examples(
        """\
  kgmem search alice
  kgmem search "likes tea"
  kgmem --quiet search person"""
    ),
)
@click.argument("query")
@click.pass_obj
def search(app: AppContext, query: str) -> None:
    """Find entities whose name, type, or observations contain QUERY.

    Matching is a case-insensitive substring test. Relations are shown
    only when both endpoints match.
    """
    app.run(app.service.search_nodes(query))


@click.command(
    "open",
    epilog=examples(
        """\
  kgmem open Alice
  kgmem open Alice Bob
  kgmem --json open Alice"""
    ),
)
@click.argument("names", nargs=-1, required=True)
@click.pass_obj
def open_cmd(app: AppContext, names: tuple[str, ...]) -> None:
    """Show the named entities and the relations between them."""
    app.run(app.service.open_nodes(list(names)))
