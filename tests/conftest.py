"""Shared pytest fixtures and test helpers for kgmem tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from kgmem.infrastructure.backends import MemoryBackend
from kgmem.services.store import GraphStore


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment variables out of settings resolution."""
    for var in ("KGMEM_CONFIG", "KGMEM_MEMORY_FILE", "MEMORY_FILE_PATH", "MEMORY_FILE"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def memory_path(tmp_path: Path) -> Path:
    """Location of a not-yet-created memory file."""
    return tmp_path / "memory.jsonl"


@pytest.fixture
def store(memory_path: Path) -> GraphStore:
    """File-backed store on a temp directory."""
    return GraphStore.from_path(memory_path)


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def memory_store(backend: MemoryBackend) -> GraphStore:
    """Store over an in-memory backend (inspect writes via ``backend``)."""
    return GraphStore(backend)


@pytest.fixture
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp directory so the CLI uses an isolated memory file.

    Use via ``@pytest.mark.usefixtures("_isolated_root")`` on command test
    classes. The memory file lands at ``tmp_path / "memory.jsonl"``.
    """
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def entity(name: str, entity_type: str = "person", *observations: str) -> dict[str, Any]:
    """Wire-shaped entity payload."""
    return {"name": name, "entityType": entity_type, "observations": list(observations)}


def relation(source: str, target: str, relation_type: str = "knows") -> dict[str, str]:
    """Wire-shaped relation payload."""
    return {"from": source, "to": target, "relationType": relation_type}


def names(graph: Any) -> list[str]:
    """Entity names of a KnowledgeGraph, in stored order."""
    return [e.name for e in graph.entities]


def triples(graph: Any) -> list[tuple[str, str, str]]:
    """Relation identity triples of a KnowledgeGraph, in stored order."""
    return [r.key for r in graph.relations]
