"""GraphService: GraphStore operations folded into ServiceResult.

Adapters (CLI commands, MCP tools) call these coroutines instead of the
store so that every outcome, including store errors, arrives as one
uniform ServiceResult. Payloads use the wire field names
(``entityType``, ``from``, ``relationType``, ...).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import BaseModel

from kgmem.domain.errors import GraphStoreError, NotFoundError, StorageIOError, ValidationError
from kgmem.services.result import ServiceResult

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from kgmem.services.store import GraphStore

logger = logging.getLogger(__name__)

_ERROR_CODES: dict[type[GraphStoreError], str] = {
    ValidationError: "VALIDATION_ERROR",
    NotFoundError: "NOT_FOUND",
    StorageIOError: "STORAGE_ERROR",
}


def error_result(op: str, exc: GraphStoreError) -> ServiceResult:
    """Map a store exception to a failed ServiceResult."""
    code = next(
        (c for cls, c in _ERROR_CODES.items() if isinstance(exc, cls)),
        "GRAPH_STORE_ERROR",
    )
    detail: dict[str, Any] = {}
    if isinstance(exc, ValidationError):
        if exc.errors:
            detail["errors"] = [
                {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors
            ]
        if exc.line is not None:
            detail["line"] = exc.line
    elif isinstance(exc, NotFoundError):
        detail["entityName"] = exc.entity_name
    elif isinstance(exc, StorageIOError) and exc.filename:
        detail["path"] = exc.filename
    return ServiceResult.failure(op, code, str(exc), detail)


async def run_operation(
    op: str,
    call: Callable[[], Awaitable[Any]],
    build: Callable[[Any], dict[str, Any]],
) -> ServiceResult:
    """Await *call* and wrap its value with *build*, or its failure with :func:`error_result`.

    Log records emitted meanwhile carry ``op`` (see :mod:`kgmem.config.logging`).
    """
    with structlog.contextvars.bound_contextvars(op=op):
        try:
            value = await call()
        except GraphStoreError as exc:
            logger.debug("Operation failed: %s", exc)
            return error_result(op, exc)
    return ServiceResult.success(op, build(value))


def _wire(item: Any) -> dict[str, Any]:
    if isinstance(item, BaseModel):
        return item.model_dump(by_alias=True)
    return dict(item)


def _dump_all(items: Iterable[Any]) -> list[dict[str, Any]]:
    return [_wire(item) for item in items]


class GraphService:
    """ServiceResult facade over a :class:`GraphStore`."""

    def __init__(self, store: GraphStore) -> None:
        self._store = store

    async def read_graph(self) -> ServiceResult:
        return await run_operation("read_graph", self._store.read_graph, lambda g: g.to_wire())

    async def search_nodes(self, query: str) -> ServiceResult:
        def build(graph: Any) -> dict[str, Any]:
            return {"query": query, **graph.to_wire()}

        return await run_operation(
            "search_nodes", lambda: self._store.search_nodes(query), build
        )

    async def open_nodes(self, names: list[str]) -> ServiceResult:
        return await run_operation(
            "open_nodes", lambda: self._store.open_nodes(names), lambda g: g.to_wire()
        )

    async def create_entities(self, entities: Iterable[Any]) -> ServiceResult:
        return await run_operation(
            "create_entities",
            lambda: self._store.create_entities(entities),
            lambda added: {"entities": _dump_all(added), "count": len(added)},
        )

    async def create_relations(self, relations: Iterable[Any]) -> ServiceResult:
        return await run_operation(
            "create_relations",
            lambda: self._store.create_relations(relations),
            lambda added: {"relations": _dump_all(added), "count": len(added)},
        )

    async def add_observations(self, updates: Iterable[Any]) -> ServiceResult:
        return await run_operation(
            "add_observations",
            lambda: self._store.add_observations(updates),
            lambda results: {"results": _dump_all(results)},
        )

    async def delete_entities(self, names: list[str]) -> ServiceResult:
        return await run_operation(
            "delete_entities",
            lambda: self._store.delete_entities(names),
            lambda _: {"entityNames": list(names)},
        )

    async def delete_observations(self, deletions: list[Any]) -> ServiceResult:
        return await run_operation(
            "delete_observations",
            lambda: self._store.delete_observations(deletions),
            lambda _: {"deletions": _dump_all(deletions)},
        )

    async def delete_relations(self, relations: list[Any]) -> ServiceResult:
        return await run_operation(
            "delete_relations",
            lambda: self._store.delete_relations(relations),
            lambda _: {"relations": _dump_all(relations)},
        )
