"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). Renderers are
dispatched by ``result.op`` in :func:`render_result`; unknown ops fall
through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from kgmem.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from kgmem.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode.

    Entity-bearing results print one name per line, relation results one
    ``from relationType to`` triple per line.
    """
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} - {msg}"

    lines = [str(e.get("name", "")) for e in result.data.get("entities", [])]
    if result.op == "create_relations":
        lines = [_triple(r) for r in result.data.get("relations", [])]
    if lines:
        return "\n".join(lines)
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _triple(relation: dict[str, Any]) -> str:
    return f"{relation.get('from', '')} {relation.get('relationType', '')} {relation.get('to', '')}"


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK: ", style="kg.ok"), Text(result.op, style="kg.op"), sep="")


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    console.print(Text(f"  {key}: ", style="kg.key"), Text(str(value)), sep="")


def _entity_table(entities: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Name", style="kg.name", no_wrap=True)
    table.add_column("Type", style="kg.type")
    table.add_column("Observations", style="kg.observation")
    for entity in entities:
        table.add_row(
            str(entity.get("name", "")),
            str(entity.get("entityType", "")),
            "\n".join(str(o) for o in entity.get("observations", [])),
        )
    return table


def _relation_table(relations: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("From", style="kg.name", no_wrap=True)
    table.add_column("Relation", style="kg.relation")
    table.add_column("To", style="kg.name", no_wrap=True)
    for relation in relations:
        table.add_row(
            str(relation.get("from", "")),
            str(relation.get("relationType", "")),
            str(relation.get("to", "")),
        )
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text("ERROR: ", style="kg.error"),
        Text(result.op, style="kg.op"),
        Text(f" - {msg}"),
        sep="",
    )

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Graph renderers ───────────────────────────────────────────────────


def _render_graph(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render read/search/open results as entity and relation tables."""
    _status_line(console, result)
    if "query" in result.data:
        _field(console, "query", repr(result.data["query"]))

    entities = result.data.get("entities", [])
    relations = result.data.get("relations", [])
    _field(console, "entities", len(entities))
    _field(console, "relations", len(relations))
    if entities:
        console.print()
        console.print(_entity_table(entities))
    if relations:
        console.print()
        console.print(_relation_table(relations))


def _render_created_entities(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    _status_line(console, result)
    entities = result.data.get("entities", [])
    _field(console, "created", len(entities))
    if entities:
        console.print()
        console.print(_entity_table(entities))


def _render_created_relations(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    _status_line(console, result)
    relations = result.data.get("relations", [])
    _field(console, "created", len(relations))
    if relations:
        console.print()
        console.print(_relation_table(relations))


def _render_added_observations(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    _status_line(console, result)
    for item in result.data.get("results", []):
        added = item.get("addedObservations", [])
        summary = ", ".join(repr(o) for o in added) if added else "(nothing new)"
        _field(console, str(item.get("entityName", "")), summary)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":"), ensure_ascii=False))
        else:
            _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "read_graph": _render_graph,
    "search_nodes": _render_graph,
    "open_nodes": _render_graph,
    "create_entities": _render_created_entities,
    "create_relations": _render_created_relations,
    "add_observations": _render_added_observations,
}
