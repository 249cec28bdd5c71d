"""MCP tools: one per graph store operation.

Each tool has an async ``<name>_impl`` coroutine, testable without the mcp
package, that returns :meth:`ServiceResult.payload`. Failures carry the full
error detail (``entityName``, ``line``, pydantic ``errors``).
``register_tools()`` wraps the impls with FastMCP decorators.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from kgmem.domain.models import Entity, ObservationAddition, ObservationDeletion, Relation
from kgmem.services.graph import GraphService

if TYPE_CHECKING:
    from collections.abc import Iterable

    from kgmem.services.store import GraphStore


# ---------------------------------------------------------------------------
# Creation tools (3)
# ---------------------------------------------------------------------------


async def create_entities_impl(store: GraphStore, entities: Iterable[Any]) -> dict[str, Any]:
    """Create entities whose names are not taken yet."""
    result = await GraphService(store).create_entities(list(entities))
    return result.payload()


async def create_relations_impl(store: GraphStore, relations: Iterable[Any]) -> dict[str, Any]:
    """Create relations whose triples are not stored yet."""
    result = await GraphService(store).create_relations(list(relations))
    return result.payload()


async def add_observations_impl(store: GraphStore, observations: Iterable[Any]) -> dict[str, Any]:
    """Append observations to existing entities."""
    result = await GraphService(store).add_observations(list(observations))
    return result.payload()


# ---------------------------------------------------------------------------
# Deletion tools (3)
# ---------------------------------------------------------------------------


async def delete_entities_impl(store: GraphStore, entity_names: Iterable[str]) -> dict[str, Any]:
    """Delete entities and their relations."""
    result = await GraphService(store).delete_entities(list(entity_names))
    return result.payload()


async def delete_observations_impl(store: GraphStore, deletions: Iterable[Any]) -> dict[str, Any]:
    """Delete specific observations from entities."""
    result = await GraphService(store).delete_observations(list(deletions))
    return result.payload()


async def delete_relations_impl(store: GraphStore, relations: Iterable[Any]) -> dict[str, Any]:
    """Delete relations by exact triple."""
    result = await GraphService(store).delete_relations(list(relations))
    return result.payload()


# ---------------------------------------------------------------------------
# Read tools (3)
# ---------------------------------------------------------------------------


async def read_graph_impl(store: GraphStore) -> dict[str, Any]:
    """Return the whole graph."""
    return (await GraphService(store).read_graph()).payload()


async def search_nodes_impl(store: GraphStore, query: str) -> dict[str, Any]:
    """Substring search over names, types, and observations."""
    return (await GraphService(store).search_nodes(query)).payload()


async def open_nodes_impl(store: GraphStore, names: Iterable[str]) -> dict[str, Any]:
    """Return named entities and the relations between them."""
    return (await GraphService(store).open_nodes(list(names))).payload()


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def register_tools(server: Any, store: GraphStore) -> None:
    """Register all 9 MCP tools on the FastMCP server."""

    @server.tool()  # type: ignore[untyped-decorator]
    async def create_entities(entities: list[Entity]) -> dict[str, Any]:
        """Create multiple new entities in the knowledge graph."""
        return await create_entities_impl(store, entities)

    @server.tool()  # type: ignore[untyped-decorator]
    async def create_relations(relations: list[Relation]) -> dict[str, Any]:
        """Create multiple new relations between entities. Relations should be in active voice."""
        return await create_relations_impl(store, relations)

    @server.tool()  # type: ignore[untyped-decorator]
    async def add_observations(observations: list[ObservationAddition]) -> dict[str, Any]:
        """Add new observations to existing entities in the knowledge graph."""
        return await add_observations_impl(store, observations)

    @server.tool()  # type: ignore[untyped-decorator]
    async def delete_entities(entityNames: list[str]) -> dict[str, Any]:  # noqa: N803
        """Delete multiple entities and their associated relations."""
        return await delete_entities_impl(store, entityNames)

    @server.tool()  # type: ignore[untyped-decorator]
    async def delete_observations(deletions: list[ObservationDeletion]) -> dict[str, Any]:
        """Delete specific observations from entities in the knowledge graph."""
        return await delete_observations_impl(store, deletions)

    @server.tool()  # type: ignore[untyped-decorator]
    async def delete_relations(relations: list[Relation]) -> dict[str, Any]:
        """Delete multiple relations from the knowledge graph."""
        return await delete_relations_impl(store, relations)

    @server.tool()  # type: ignore[untyped-decorator]
    async def read_graph() -> dict[str, Any]:
        """Read the entire knowledge graph."""
        return await read_graph_impl(store)

    @server.tool()  # type: ignore[untyped-decorator]
    async def search_nodes(query: str) -> dict[str, Any]:
        """Search for nodes in the knowledge graph based on a query."""
        return await search_nodes_impl(store, query)

    @server.tool()  # type: ignore[untyped-decorator]
    async def open_nodes(names: list[str]) -> dict[str, Any]:
        """Open specific nodes in the knowledge graph by their names."""
        return await open_nodes_impl(store, names)
