"""Command group: adding and removing observations."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from kgmem.commands._help import examples

if TYPE_CHECKING:
    from kgmem.commands._context import AppContext

_OBSERVATION_EXAMPLES = """\
  kgmem observation add Alice "likes tea" "lives in Oslo"
  kgmem --json observation delete Alice "likes tea" "lives in Oslo"
  kgmem observation delete Ghost anything"""


@click.group(epilog=examples(_OBSERVATION_EXAMPLES))
@click.pass_obj
def observation(app: AppContext) -> None:
    """Add and delete observations on entities."""


@observation.command(
    epilog=examples(
        """\
  kgmem observation add Alice "likes tea"
  kgmem --json observation add Alice "likes tea" "lives in Oslo"
  kgmem observation add Alice tea coffee"""
    )
)
@click.argument("name")
@click.argument("contents", nargs=-1, required=True)
@click.pass_obj
def add(app: AppContext, name: str, contents: tuple[str, ...]) -> None:
    """Append observations to entity NAME (fails if NAME does not exist)."""
    app.run(app.service.add_observations([{"entityName": name, "contents": list(contents)}]))


@observation.command(
    epilog=examples(
        """\
  kgmem --json observation delete Alice "likes tea" "lives in Oslo"
  kgmem observation delete Ghost anything"""
    )
)
@click.argument("name")
@click.argument("observations", nargs=-1, required=True)
@click.pass_obj
def delete(app: AppContext, name: str, observations: tuple[str, ...]) -> None:
    """Remove observations from entity NAME (no-op if NAME does not exist)."""
    app.run(
        app.service.delete_observations(
            [{"entityName": name, "observations": list(observations)}]
        )
    )
