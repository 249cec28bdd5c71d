"""Pydantic models for the knowledge graph.

Field names on the wire follow the persisted JSON shape (``entityType``,
``from``, ``relationType``, ...). Python attributes use snake_case; both
spellings are accepted on input and the wire alias is used on output.

Scalars are strict strings: ``{"name": 1}`` is a shape failure, not a
coercion. Unknown keys are ignored.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictStr

_MODEL_CONFIG = ConfigDict(populate_by_name=True, extra="ignore")


class Entity(BaseModel):
    """A named node with a type tag and an ordered list of observations."""

    model_config = _MODEL_CONFIG

    name: StrictStr
    entity_type: StrictStr = Field(alias="entityType")
    observations: list[StrictStr]


class Relation(BaseModel):
    """A directed, typed edge between two entity names."""

    model_config = _MODEL_CONFIG

    source: StrictStr = Field(alias="from")
    target: StrictStr = Field(alias="to")
    relation_type: StrictStr = Field(alias="relationType")

    @property
    def key(self) -> tuple[str, str, str]:
        """Identity triple ``(from, to, relationType)``."""
        return (self.source, self.target, self.relation_type)


class KnowledgeGraph(BaseModel):
    """The full collection of entities and relations."""

    model_config = _MODEL_CONFIG

    entities: list[Entity] = Field(default_factory=list)
    relations: list[Relation] = Field(default_factory=list)

    def entity_names(self) -> set[str]:
        return {e.name for e in self.entities}

    def find_entity(self, name: str) -> Entity | None:
        """Return the entity named exactly *name*, or None."""
        for entity in self.entities:
            if entity.name == name:
                return entity
        return None

    def subgraph(self, entities: list[Entity]) -> KnowledgeGraph:
        """Restrict to *entities* and the relations between them.

        A relation is kept only if both of its endpoints name one of
        the given entities.
        """
        names = {e.name for e in entities}
        relations = [r for r in self.relations if r.source in names and r.target in names]
        return KnowledgeGraph(entities=entities, relations=relations)

    def to_wire(self) -> dict[str, list[dict[str, object]]]:
        return self.model_dump(by_alias=True)


# --- Observation batches ---


class ObservationAddition(BaseModel):
    """One item of an ``add_observations`` batch."""

    model_config = _MODEL_CONFIG

    entity_name: StrictStr = Field(alias="entityName")
    contents: list[StrictStr]


class ObservationDeletion(BaseModel):
    """One item of a ``delete_observations`` batch."""

    model_config = _MODEL_CONFIG

    entity_name: StrictStr = Field(alias="entityName")
    observations: list[StrictStr]


class AddedObservations(BaseModel):
    """Per-entity result of ``add_observations``."""

    model_config = _MODEL_CONFIG

    entity_name: StrictStr = Field(alias="entityName")
    added_observations: list[StrictStr] = Field(alias="addedObservations")
