"""Snapshots of the external entity catalog and topology store."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from trace_ledger.models import Entity, TopologyEdge

EntitySource = Mapping[str, Entity] | Iterable[Entity]


def index_entities(entities: EntitySource) -> dict[str, Entity]:
    """Build an id -> entity lookup from a sequence or an existing mapping."""
    if isinstance(entities, Mapping):
        return dict(entities)
    return {entity.id: entity for entity in entities}


def iter_entities(entities: EntitySource) -> list[Entity]:
    """Entities in catalog order, whatever shape they were handed over in."""
    if isinstance(entities, Mapping):
        return list(entities.values())
    return list(entities)


@dataclass
class Catalog:
    """A consistent point-in-time view of entities and topology edges."""

    entities: list[Entity] = field(default_factory=list)
    edges: list[TopologyEdge] = field(default_factory=list)

    _index: dict[str, Entity] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._index = index_entities(self.entities)

    def get(self, item_id: str) -> Entity | None:
        return self._index.get(item_id)
