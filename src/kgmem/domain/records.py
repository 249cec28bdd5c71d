"""Line-delimited record codec for the persisted graph.

Each non-blank line is one JSON object tagged by a ``type`` discriminator
with the entity or relation fields spread alongside it::

    {"type":"entity","name":"Alice","entityType":"person","observations":[]}
    {"type":"relation","from":"Alice","to":"Bob","relationType":"knows"}

Entities are always written before relations. Decoding is strict: one bad
record fails the whole graph.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal

from pydantic import Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from kgmem.domain.errors import ValidationError
from kgmem.domain.models import Entity, KnowledgeGraph, Relation


class EntityRecord(Entity):
    type: Literal["entity"] = "entity"


class RelationRecord(Relation):
    type: Literal["relation"] = "relation"


Record = Annotated[EntityRecord | RelationRecord, Field(discriminator="type")]

_record_adapter: TypeAdapter[EntityRecord | RelationRecord] = TypeAdapter(Record)


def _dumps(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def encode_entity(entity: Entity) -> str:
    """Serialize one entity as a tagged record line."""
    return _dumps({"type": "entity", **entity.model_dump(by_alias=True)})


def encode_relation(relation: Relation) -> str:
    """Serialize one relation as a tagged record line."""
    return _dumps({"type": "relation", **relation.model_dump(by_alias=True)})


def encode_graph(graph: KnowledgeGraph) -> str:
    """Serialize *graph* to newline-joined records (no trailing newline)."""
    lines = [encode_entity(e) for e in graph.entities]
    lines.extend(encode_relation(r) for r in graph.relations)
    return "\n".join(lines)


def decode_record(line: str, *, lineno: int | None = None) -> Entity | Relation:
    """Parse and validate one record line.

    Raises:
        ValidationError: The line is not JSON, carries an unknown
            discriminator, or fails the entity/relation shape.
    """
    where = f" on line {lineno}" if lineno is not None else ""
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as exc:
        msg = f"Malformed record{where}: {exc.msg}"
        raise ValidationError(msg, line=lineno) from exc

    try:
        record = _record_adapter.validate_python(payload)
    except PydanticValidationError as exc:
        msg = f"Invalid record{where}: {exc.error_count()} validation error(s)"
        raise ValidationError(
            msg, errors=exc.errors(include_url=False), line=lineno
        ) from exc

    if isinstance(record, EntityRecord):
        return Entity.model_validate(record.model_dump())
    return Relation.model_validate(record.model_dump())


def decode_graph(text: str) -> KnowledgeGraph:
    """Decode every non-blank line of *text* into a graph.

    Records are separated by LF only. Other Unicode line breaks
    (U+2028, U+0085, ...) are written unescaped inside JSON strings.
    """
    graph = KnowledgeGraph()
    for lineno, line in enumerate(text.split("\n"), start=1):
        if not line.strip():
            continue
        item = decode_record(line, lineno=lineno)
        if isinstance(item, Entity):
            graph.entities.append(item)
        else:
            graph.relations.append(item)
    return graph
