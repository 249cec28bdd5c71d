"""Command group: relation creation and deletion."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from kgmem.commands._help import examples

if TYPE_CHECKING:
    from kgmem.commands._context import AppContext

_RELATION_EXAMPLES = """\
  kgmem relation create Alice knows Bob
  kgmem relation create Alice works_at Acme
  kgmem relation delete Alice knows Bob"""


def _relation(source: str, relation_type: str, target: str) -> dict[str, str]:
    return {"from": source, "to": target, "relationType": relation_type}


@click.group(epilog=examples(_RELATION_EXAMPLES))
@click.pass_obj
def relation(app: AppContext) -> None:
    """Create and delete relations (FROM RELATION_TYPE TO)."""


@relation.command(
    epilog=examples(
        """\
  kgmem relation create Alice knows Bob
  kgmem --json relation create Alice works_at Acme"""
    )
)
@click.argument("source", metavar="FROM")
@click.argument("relation_type")
@click.argument("target", metavar="TO")
@click.pass_obj
def create(app: AppContext, source: str, relation_type: str, target: str) -> None:
    """Create a directed relation. Existing triples are left untouched."""
    app.run(app.service.create_relations([_relation(source, relation_type, target)]))


@relation.command(
    epilog=examples(
        """\
  kgmem relation delete Alice knows Bob"""
    )
)
@click.argument("source", metavar="FROM")
@click.argument("relation_type")
@click.argument("target", metavar="TO")
@click.pass_obj
def delete(app: AppContext, source: str, relation_type: str, target: str) -> None:
    """Delete the relation with exactly this triple, if present."""
    app.run(app.service.delete_relations([_relation(source, relation_type, target)]))
