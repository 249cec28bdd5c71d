"""Command group: entity creation and deletion."""

from __future__ import annotations

import json
from typing import IO, TYPE_CHECKING

import click

from kgmem.commands._help import examples
from kgmem.services.result import ServiceResult

if TYPE_CHECKING:
    from kgmem.commands._context import AppContext

_ENTITY_EXAMPLES = """\
  kgmem entity create Alice --type person -o "likes tea"
  kgmem entity import people.json
  cat people.json | kgmem entity import -
  kgmem entity delete Alice Bob"""


@click.group(epilog=examples(_ENTITY_EXAMPLES))
@click.pass_obj
def entity(app: AppContext) -> None:
    """Create and delete entities."""


@entity.command(
    epilog=examples(
        """\
  kgmem entity create Alice --type person
  kgmem entity create Alice --type person -o "likes tea" -o "lives in Oslo"
  kgmem --json entity create Acme --type organization"""
    )
)
@click.argument("name")
@click.option("-t", "--type", "entity_type", required=True, help="Entity type tag.")
@click.option(
    "-o", "--observation", "observations", multiple=True, help="Observation (repeatable)."
)
@click.pass_obj
def create(app: AppContext, name: str, entity_type: str, observations: tuple[str, ...]) -> None:
    """Create one entity. Existing names are left untouched."""
    payload = {"name": name, "entityType": entity_type, "observations": list(observations)}
    app.run(app.service.create_entities([payload]))


@entity.command(
    "import",
    epilog=examples(
        """\
  kgmem entity import people.json
  cat people.json | kgmem entity import -"""
    ),
)
@click.argument("file", type=click.File("r", encoding="utf-8"))
@click.pass_obj
def import_cmd(app: AppContext, file: IO[str]) -> None:
    """Create entities from a JSON array in FILE (``-`` for stdin).

    Each element needs "name", "entityType", and "observations".
    """
    try:
        items = json.load(file)
    except json.JSONDecodeError as exc:
        msg = f"Error reading {file.name}: {exc}"
        app.emit(ServiceResult.failure("create_entities", "INVALID_FILE", msg))
        return

    if not isinstance(items, list):
        msg = "JSON input must contain a top-level array."
        app.emit(ServiceResult.failure("create_entities", "INVALID_FORMAT", msg))
        return

    app.run(app.service.create_entities(items))


@entity.command(
    epilog=examples(
        """\
  kgmem entity delete Alice
  kgmem entity delete Alice Bob"""
    )
)
@click.argument("names", nargs=-1, required=True)
@click.pass_obj
def delete(app: AppContext, names: tuple[str, ...]) -> None:
    """Delete entities and every relation touching them."""
    app.run(app.service.delete_entities(list(names)))
