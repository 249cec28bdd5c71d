"""Tests for GraphStore: load/mutate/save semantics of every operation."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from kgmem.domain.errors import NotFoundError, StorageIOError, ValidationError
from kgmem.domain.models import Entity, KnowledgeGraph, Relation
from kgmem.infrastructure.backends import MemoryBackend
from kgmem.services.store import GraphStore
from tests.conftest import entity, names, relation, triples

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _seed(store: GraphStore) -> None:
    """Alice -knows-> Bob -works_at-> Acme, plus Carol (isolated)."""
    await store.create_entities(
        [
            entity("Alice", "person", "likes tea", "Lives in Oslo"),
            entity("Bob", "person", "plays chess"),
            entity("Acme", "organization", "makes anvils"),
            entity("Carol", "person"),
        ]
    )
    await store.create_relations(
        [
            relation("Alice", "Bob", "knows"),
            relation("Bob", "Acme", "works_at"),
        ]
    )


# ---------------------------------------------------------------------------
# Load / save
# ---------------------------------------------------------------------------


class TestLoadSave:
    @pytest.mark.asyncio
    async def test_missing_file_is_empty_graph(self, store: GraphStore, memory_path: Path):
        graph = await store.read_graph()
        assert graph == KnowledgeGraph()
        assert not memory_path.exists()

    @pytest.mark.asyncio
    async def test_round_trip(self, store: GraphStore):
        graph = KnowledgeGraph(
            entities=[
                Entity(name="A", entity_type="t", observations=["x", "y"]),
                Entity(name="B", entity_type="t", observations=[]),
            ],
            relations=[
                Relation(source="A", target="B", relation_type="r"),
                Relation(source="B", target="Nowhere", relation_type="r"),
            ],
        )
        await store.save_graph(graph)
        assert await store.load_graph() == graph

    @pytest.mark.asyncio
    @pytest.mark.parametrize("separator", ["\u2028", "\u2029", "\x85", "\x0b", "\x1c"])
    async def test_unicode_line_breaks_survive_round_trip(self, store: GraphStore, separator: str):
        text = f"x{separator}y"
        added = await store.create_entities([entity(f"A{separator}B", "t", text)])
        assert len(added) == 1

        graph = await store.read_graph()
        assert graph.entities[0].name == f"A{separator}B"
        assert graph.entities[0].observations == [text]

        await store.add_observations([{"entityName": f"A{separator}B", "contents": ["z"]}])
        assert (await store.read_graph()).entities[0].observations == [text, "z"]

    @pytest.mark.asyncio
    async def test_file_layout(self, store: GraphStore, memory_path: Path):
        await _seed(store)
        lines = memory_path.read_text(encoding="utf-8").split("\n")
        kinds = [json.loads(line)["type"] for line in lines]
        assert kinds == ["entity"] * 4 + ["relation"] * 2

    @pytest.mark.asyncio
    async def test_invalid_record_fails_whole_load(self, store: GraphStore, memory_path: Path):
        memory_path.write_text(
            '{"type":"entity","name":"A","entityType":"t","observations":[]}\n'
            '{"type":"entity","name":"B","observations":[]}\n',
            encoding="utf-8",
        )
        with pytest.raises(ValidationError) as excinfo:
            await store.read_graph()
        assert excinfo.value.line == 2

    @pytest.mark.asyncio
    async def test_invalid_file_blocks_mutation(self, store: GraphStore, memory_path: Path):
        memory_path.write_text("garbage", encoding="utf-8")
        with pytest.raises(ValidationError):
            await store.create_entities([entity("A")])
        assert memory_path.read_text(encoding="utf-8") == "garbage"

    @pytest.mark.asyncio
    async def test_read_io_error_propagates(self, tmp_path: Path):
        store = GraphStore.from_path(tmp_path)
        with pytest.raises(StorageIOError):
            await store.read_graph()

    @pytest.mark.asyncio
    async def test_save_rewrites_instead_of_appending(
        self, memory_store: GraphStore, backend: MemoryBackend
    ):
        await memory_store.create_entities([entity("A")])
        await memory_store.delete_entities(["A"])
        assert backend.content == ""

    @pytest.mark.asyncio
    async def test_save_validates_graph(self, memory_store: GraphStore, backend: MemoryBackend):
        graph = KnowledgeGraph(entities=[Entity(name="A", entity_type="t", observations=[])])
        graph.entities[0].observations.append(7)  # type: ignore[arg-type]
        with pytest.raises(ValidationError):
            await memory_store.save_graph(graph)
        assert backend.writes == 0


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


class TestReadGraph:
    @pytest.mark.asyncio
    async def test_returns_everything(self, store: GraphStore):
        await _seed(store)
        graph = await store.read_graph()
        assert names(graph) == ["Alice", "Bob", "Acme", "Carol"]
        assert triples(graph) == [("Alice", "Bob", "knows"), ("Bob", "Acme", "works_at")]

    @pytest.mark.asyncio
    async def test_reads_do_not_write(self, memory_store: GraphStore, backend: MemoryBackend):
        await memory_store.read_graph()
        await memory_store.search_nodes("x")
        await memory_store.open_nodes(["x"])
        assert backend.writes == 0


class TestSearchNodes:
    @pytest.mark.asyncio
    async def test_matches_name_case_insensitively(self, store: GraphStore):
        await _seed(store)
        assert names(await store.search_nodes("ALICE")) == ["Alice"]

    @pytest.mark.asyncio
    async def test_matches_entity_type(self, store: GraphStore):
        await _seed(store)
        assert names(await store.search_nodes("organ")) == ["Acme"]

    @pytest.mark.asyncio
    async def test_matches_observation_text(self, store: GraphStore):
        await _seed(store)
        assert names(await store.search_nodes("oslo")) == ["Alice"]

    @pytest.mark.asyncio
    async def test_substring_not_tokenized(self, store: GraphStore):
        await _seed(store)
        assert names(await store.search_nodes("tea chess")) == []

    @pytest.mark.asyncio
    async def test_relations_need_both_endpoints(self, store: GraphStore):
        await _seed(store)
        graph = await store.search_nodes("person")
        assert names(graph) == ["Alice", "Bob", "Carol"]
        assert triples(graph) == [("Alice", "Bob", "knows")]

    @pytest.mark.asyncio
    async def test_empty_query_matches_everything(self, store: GraphStore):
        await _seed(store)
        assert await store.search_nodes("") == await store.read_graph()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "a", "person", "o", "zzz", "ANVIL"])
    async def test_containment(self, store: GraphStore, query: str):
        await _seed(store)
        graph = await store.search_nodes(query)
        found = set(names(graph))
        for r in graph.relations:
            assert r.source in found
            assert r.target in found


class TestOpenNodes:
    @pytest.mark.asyncio
    async def test_exact_names_only(self, store: GraphStore):
        await _seed(store)
        assert names(await store.open_nodes(["alice", "Ali", "Bob"])) == ["Bob"]

    @pytest.mark.asyncio
    async def test_relations_between_opened(self, store: GraphStore):
        await _seed(store)
        graph = await store.open_nodes(["Alice", "Bob", "Carol"])
        assert triples(graph) == [("Alice", "Bob", "knows")]

    @pytest.mark.asyncio
    async def test_unknown_names_ignored(self, store: GraphStore):
        await _seed(store)
        graph = await store.open_nodes(["Nobody"])
        assert graph == KnowledgeGraph()


# ---------------------------------------------------------------------------
# Entity mutations
# ---------------------------------------------------------------------------


class TestCreateEntities:
    @pytest.mark.asyncio
    async def test_create_then_open(self, store: GraphStore):
        added = await store.create_entities([entity("Alice", "person", "likes tea")])
        assert [e.name for e in added] == ["Alice"]
        assert added[0].observations == ["likes tea"]

        graph = await store.open_nodes(["Alice", "Bob"])
        assert names(graph) == ["Alice"]
        assert graph.relations == []

    @pytest.mark.asyncio
    async def test_idempotent(self, store: GraphStore):
        first = await store.create_entities([entity("Alice")])
        second = await store.create_entities([entity("Alice")])
        assert len(first) == 1
        assert second == []
        assert names(await store.read_graph()) == ["Alice"]

    @pytest.mark.asyncio
    async def test_existing_entity_not_merged(self, store: GraphStore):
        await store.create_entities([entity("Alice", "person", "likes tea")])
        await store.create_entities([entity("Alice", "robot", "likes oil")])
        alice = (await store.read_graph()).entities[0]
        assert alice.entity_type == "person"
        assert alice.observations == ["likes tea"]

    @pytest.mark.asyncio
    async def test_returns_only_new(self, store: GraphStore):
        await store.create_entities([entity("Alice")])
        added = await store.create_entities([entity("Alice"), entity("Bob")])
        assert [e.name for e in added] == ["Bob"]

    @pytest.mark.asyncio
    async def test_duplicate_names_in_one_batch_keep_first(self, store: GraphStore):
        added = await store.create_entities([entity("A", "first"), entity("A", "second")])
        assert [e.entity_type for e in added] == ["first"]
        assert names(await store.read_graph()) == ["A"]

    @pytest.mark.asyncio
    async def test_accepts_model_instances(self, store: GraphStore):
        added = await store.create_entities(
            [Entity(name="A", entity_type="t", observations=["x"])]
        )
        assert added[0].name == "A"

    @pytest.mark.asyncio
    async def test_invalid_shape_aborts_before_save(
        self, memory_store: GraphStore, backend: MemoryBackend
    ):
        with pytest.raises(ValidationError):
            await memory_store.create_entities([entity("Ok"), {"name": "Broken"}])
        assert backend.writes == 0


class TestDeleteEntities:
    @pytest.mark.asyncio
    async def test_cascades_to_relations(self, store: GraphStore):
        await _seed(store)
        await store.delete_entities(["Bob"])
        graph = await store.read_graph()
        assert "Bob" not in names(graph)
        for r in graph.relations:
            assert "Bob" not in (r.source, r.target)
        assert graph.relations == []

    @pytest.mark.asyncio
    async def test_cascade_hits_dangling_relations(self, store: GraphStore):
        await store.create_relations([relation("Ghost", "Other")])
        await store.delete_entities(["Ghost"])
        assert (await store.read_graph()).relations == []

    @pytest.mark.asyncio
    async def test_missing_names_ignored(self, store: GraphStore):
        await _seed(store)
        await store.delete_entities(["Nobody"])
        assert len((await store.read_graph()).entities) == 4

    @pytest.mark.asyncio
    async def test_always_persists(self, memory_store: GraphStore, backend: MemoryBackend):
        await memory_store.delete_entities([])
        assert backend.writes == 1


# ---------------------------------------------------------------------------
# Relation mutations
# ---------------------------------------------------------------------------


class TestCreateRelations:
    @pytest.mark.asyncio
    async def test_dedup_against_stored(self, store: GraphStore):
        await store.create_relations([relation("A", "B", "knows")])
        added = await store.create_relations([relation("A", "B", "knows")])
        assert added == []
        assert triples(await store.read_graph()) == [("A", "B", "knows")]

    @pytest.mark.asyncio
    async def test_identity_is_the_full_triple(self, store: GraphStore):
        await store.create_relations([relation("A", "B", "knows")])
        added = await store.create_relations(
            [relation("B", "A", "knows"), relation("A", "B", "likes")]
        )
        assert len(added) == 2

    @pytest.mark.asyncio
    async def test_no_referential_integrity(self, store: GraphStore):
        added = await store.create_relations([relation("Nobody", "Nothing")])
        assert len(added) == 1
        assert (await store.read_graph()).entities == []

    @pytest.mark.asyncio
    async def test_duplicates_within_input_are_both_kept(self, store: GraphStore):
        added = await store.create_relations([relation("A", "B"), relation("A", "B")])
        assert len(added) == 2
        assert triples(await store.read_graph()) == [("A", "B", "knows")] * 2

    @pytest.mark.asyncio
    async def test_invalid_shape(self, memory_store: GraphStore, backend: MemoryBackend):
        with pytest.raises(ValidationError):
            await memory_store.create_relations([{"from": "A", "to": "B"}])
        assert backend.writes == 0


class TestDeleteRelations:
    @pytest.mark.asyncio
    async def test_removes_exact_match(self, store: GraphStore):
        await _seed(store)
        await store.delete_relations([relation("Alice", "Bob", "knows")])
        assert triples(await store.read_graph()) == [("Bob", "Acme", "works_at")]

    @pytest.mark.asyncio
    async def test_partial_match_not_removed(self, store: GraphStore):
        await _seed(store)
        await store.delete_relations([relation("Alice", "Bob", "likes")])
        assert len((await store.read_graph()).relations) == 2

    @pytest.mark.asyncio
    async def test_missing_ignored_but_persists(
        self, memory_store: GraphStore, backend: MemoryBackend
    ):
        await memory_store.delete_relations([relation("X", "Y")])
        assert backend.writes == 1

    @pytest.mark.asyncio
    async def test_validates_shape(self, memory_store: GraphStore, backend: MemoryBackend):
        with pytest.raises(ValidationError):
            await memory_store.delete_relations([{"from": "A", "to": 3, "relationType": "r"}])
        assert backend.writes == 0


# ---------------------------------------------------------------------------
# Observation mutations
# ---------------------------------------------------------------------------


class TestAddObservations:
    @pytest.mark.asyncio
    async def test_appends_only_new_texts(self, store: GraphStore):
        await _seed(store)
        results = await store.add_observations(
            [{"entityName": "Alice", "contents": ["likes tea", "owns a cat"]}]
        )
        assert results[0].entity_name == "Alice"
        assert results[0].added_observations == ["owns a cat"]
        alice = (await store.open_nodes(["Alice"])).entities[0]
        assert alice.observations == ["likes tea", "Lives in Oslo", "owns a cat"]

    @pytest.mark.asyncio
    async def test_no_dedup_within_pending_contents(self, store: GraphStore):
        await store.create_entities([entity("A")])
        results = await store.add_observations([{"entityName": "A", "contents": ["x", "x"]}])
        assert results[0].added_observations == ["x", "x"]

    @pytest.mark.asyncio
    async def test_later_items_see_earlier_items(self, store: GraphStore):
        await store.create_entities([entity("A")])
        results = await store.add_observations(
            [
                {"entityName": "A", "contents": ["x"]},
                {"entityName": "A", "contents": ["x", "y"]},
            ]
        )
        assert [r.added_observations for r in results] == [["x"], ["y"]]

    @pytest.mark.asyncio
    async def test_missing_entity_on_empty_graph(self, store: GraphStore):
        with pytest.raises(NotFoundError) as excinfo:
            await store.add_observations([{"entityName": "Ghost", "contents": ["x"]}])
        assert excinfo.value.entity_name == "Ghost"
        assert await store.read_graph() == KnowledgeGraph()

    @pytest.mark.asyncio
    async def test_missing_entity_aborts_whole_batch(self, store: GraphStore):
        await _seed(store)
        with pytest.raises(NotFoundError):
            await store.add_observations(
                [
                    {"entityName": "Alice", "contents": ["new fact"]},
                    {"entityName": "Ghost", "contents": ["x"]},
                ]
            )
        alice = (await store.open_nodes(["Alice"])).entities[0]
        assert "new fact" not in alice.observations

    @pytest.mark.asyncio
    async def test_persists_once(self, memory_store: GraphStore, backend: MemoryBackend):
        await memory_store.create_entities([entity("A"), entity("B")])
        writes = backend.writes
        await memory_store.add_observations(
            [{"entityName": "A", "contents": ["x"]}, {"entityName": "B", "contents": ["y"]}]
        )
        assert backend.writes == writes + 1


class TestDeleteObservations:
    @pytest.mark.asyncio
    async def test_removes_exact_texts(self, store: GraphStore):
        await _seed(store)
        await store.delete_observations(
            [{"entityName": "Alice", "observations": ["likes tea", "lives in oslo"]}]
        )
        alice = (await store.open_nodes(["Alice"])).entities[0]
        assert alice.observations == ["Lives in Oslo"]

    @pytest.mark.asyncio
    async def test_missing_entity_skipped(self, store: GraphStore):
        await _seed(store)
        await store.delete_observations(
            [
                {"entityName": "Ghost", "observations": ["x"]},
                {"entityName": "Bob", "observations": ["plays chess"]},
            ]
        )
        bob = (await store.open_nodes(["Bob"])).entities[0]
        assert bob.observations == []


class TestObservationAsymmetry:
    """add_observations fails on a missing entity; delete_observations skips it.

    Kept deliberately: callers rely on deletes being idempotent cleanup.
    """

    @pytest.mark.asyncio
    async def test_add_raises_delete_does_not(self, store: GraphStore):
        with pytest.raises(NotFoundError):
            await store.add_observations([{"entityName": "Ghost", "contents": ["x"]}])
        await store.delete_observations([{"entityName": "Ghost", "observations": ["x"]}])


# ---------------------------------------------------------------------------
# Writer serialization
# ---------------------------------------------------------------------------


class TestWriteScope:
    @pytest.mark.asyncio
    async def test_concurrent_creates_do_not_lose_updates(self, store: GraphStore):
        batch = [store.create_entities([entity(f"E{i}")]) for i in range(20)]
        await asyncio.gather(*batch)
        assert sorted(names(await store.read_graph())) == sorted(f"E{i}" for i in range(20))

    @pytest.mark.asyncio
    async def test_failed_cycle_releases_lock(self, store: GraphStore):
        with pytest.raises(NotFoundError):
            await store.add_observations([{"entityName": "Ghost", "contents": ["x"]}])
        added = await asyncio.wait_for(store.create_entities([entity("A")]), timeout=5)
        assert len(added) == 1
