"""GraphStore: load, mutate, and persist the knowledge graph.

Every operation materializes the graph fresh from the backend. Mutations
run their whole load -> mutate -> save cycle inside :meth:`GraphStore._write_scope`,
which holds the store's writer lock and only saves if the body completes.
An error anywhere in the cycle therefore leaves the persisted graph exactly
as it was.

The lock serializes writers that share one store instance. Separate store
instances (or processes) pointing at the same file are not coordinated;
the later save wins.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from kgmem.domain.errors import NotFoundError, ValidationError
from kgmem.domain.models import (
    AddedObservations,
    Entity,
    KnowledgeGraph,
    ObservationAddition,
    ObservationDeletion,
    Relation,
)
from kgmem.domain.records import decode_graph, encode_graph
from kgmem.infrastructure.backends import FileBackend

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable, Mapping

    from kgmem.infrastructure.backends import GraphBackend

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _coerce(model_cls: type[M], items: Iterable[M | Mapping[str, Any]]) -> list[M]:
    """Validate each item into *model_cls*, raising our ValidationError on failure."""
    result: list[M] = []
    for index, item in enumerate(items):
        if isinstance(item, model_cls):
            item = item.model_dump()
        try:
            result.append(model_cls.model_validate(item))
        except PydanticValidationError as exc:
            msg = f"Invalid {model_cls.__name__} at index {index}: {exc.error_count()} error(s)"
            raise ValidationError(msg, errors=exc.errors(include_url=False)) from exc
    return result


class GraphStore:
    """Persistent entity/relation graph over a :class:`GraphBackend`.

    Usage::

        store = GraphStore.from_path("memory.jsonl")
        await store.create_entities([{"name": "Alice", "entityType": "person",
                                      "observations": []}])
        graph = await store.search_nodes("alice")
    """

    def __init__(self, backend: GraphBackend) -> None:
        self._backend = backend
        self._lock = asyncio.Lock()

    @classmethod
    def from_path(cls, path: Path | str) -> GraphStore:
        return cls(FileBackend(path))

    @property
    def backend(self) -> GraphBackend:
        return self._backend

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def load_graph(self) -> KnowledgeGraph:
        """Read and decode the full graph; a missing resource is empty."""
        text = await self._backend.read_text()
        if text is None:
            return KnowledgeGraph()
        graph = decode_graph(text)
        logger.debug(
            "Loaded graph: %d entities, %d relations",
            len(graph.entities),
            len(graph.relations),
        )
        return graph

    async def save_graph(self, graph: KnowledgeGraph) -> None:
        """Validate *graph* and overwrite the backing resource with it.

        Does not take the writer lock; mutating operations call it from
        inside their write scope.
        """
        try:
            graph = KnowledgeGraph.model_validate(graph.model_dump())
        except PydanticValidationError as exc:
            msg = f"Invalid graph: {exc.error_count()} validation error(s)"
            raise ValidationError(msg, errors=exc.errors(include_url=False)) from exc
        await self._backend.write_text(encode_graph(graph))
        logger.debug(
            "Saved graph: %d entities, %d relations",
            len(graph.entities),
            len(graph.relations),
        )

    @asynccontextmanager
    async def _write_scope(self) -> AsyncIterator[KnowledgeGraph]:
        """Hold the writer lock across one load -> mutate -> save cycle."""
        async with self._lock:
            graph = await self.load_graph()
            yield graph
            await self.save_graph(graph)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def read_graph(self) -> KnowledgeGraph:
        return await self.load_graph()

    async def search_nodes(self, query: str) -> KnowledgeGraph:
        """Case-insensitive substring search over names, types, and observations."""
        graph = await self.load_graph()
        needle = query.lower()
        matches = [
            e
            for e in graph.entities
            if needle in e.name.lower()
            or needle in e.entity_type.lower()
            or any(needle in o.lower() for o in e.observations)
        ]
        return graph.subgraph(matches)

    async def open_nodes(self, names: Iterable[str]) -> KnowledgeGraph:
        """Entities named exactly in *names*; unknown names are ignored."""
        wanted = set(names)
        graph = await self.load_graph()
        return graph.subgraph([e for e in graph.entities if e.name in wanted])

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_entities(self, entities: Iterable[Entity | Mapping[str, Any]]) -> list[Entity]:
        """Add entities whose names are new; existing names are skipped.

        Returns exactly the entities that were added.
        """
        candidates = _coerce(Entity, entities)
        async with self._write_scope() as graph:
            known = graph.entity_names()
            added: list[Entity] = []
            for entity in candidates:
                if entity.name in known:
                    logger.debug("Entity %r already exists, skipping", entity.name)
                    continue
                known.add(entity.name)
                added.append(entity)
            graph.entities.extend(added)
        return added

    async def create_relations(
        self, relations: Iterable[Relation | Mapping[str, Any]]
    ) -> list[Relation]:
        """Add relations whose triples are not already stored.

        Duplicates within *relations* itself are not collapsed.
        """
        candidates = _coerce(Relation, relations)
        async with self._write_scope() as graph:
            existing = {r.key for r in graph.relations}
            added = [r for r in candidates if r.key not in existing]
            graph.relations.extend(added)
        return added

    async def add_observations(
        self, updates: Iterable[ObservationAddition | Mapping[str, Any]]
    ) -> list[AddedObservations]:
        """Append new observation texts to existing entities.

        Raises:
            NotFoundError: Any entity in the batch is missing. Nothing is saved.
        """
        items = _coerce(ObservationAddition, updates)
        results: list[AddedObservations] = []
        async with self._write_scope() as graph:
            for item in items:
                entity = graph.find_entity(item.entity_name)
                if entity is None:
                    raise NotFoundError(item.entity_name)
                new = [c for c in item.contents if c not in entity.observations]
                entity.observations.extend(new)
                results.append(
                    AddedObservations(entity_name=item.entity_name, added_observations=new)
                )
        return results

    async def delete_entities(self, names: Iterable[str]) -> None:
        """Remove entities and every relation touching them."""
        doomed = set(names)
        async with self._write_scope() as graph:
            graph.entities = [e for e in graph.entities if e.name not in doomed]
            graph.relations = [
                r for r in graph.relations if r.source not in doomed and r.target not in doomed
            ]

    async def delete_observations(
        self, deletions: Iterable[ObservationDeletion | Mapping[str, Any]]
    ) -> None:
        """Remove observation texts; deletions for missing entities are skipped."""
        items = _coerce(ObservationDeletion, deletions)
        async with self._write_scope() as graph:
            for item in items:
                entity = graph.find_entity(item.entity_name)
                if entity is None:
                    logger.debug("Entity %r not found, skipping deletion", item.entity_name)
                    continue
                doomed = set(item.observations)
                entity.observations = [o for o in entity.observations if o not in doomed]

    async def delete_relations(self, relations: Iterable[Relation | Mapping[str, Any]]) -> None:
        """Remove stored relations matching any of the given triples."""
        doomed = {r.key for r in _coerce(Relation, relations)}
        async with self._write_scope() as graph:
            graph.relations = [r for r in graph.relations if r.key not in doomed]
