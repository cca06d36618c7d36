"""Graph analyses over links: orphans, cycles, coverage, impact and baseline.

Every function here is stateless. Links, entities and edges are passed in on
each call and nothing passed in is modified.
"""

import dataclasses
from collections.abc import Iterable, Iterator

import structlog

from trace_ledger.catalog import EntitySource, index_entities, iter_entities
from trace_ledger.models import (
    HIERARCHICAL_LINK_TYPES,
    SATISFYING_LINK_TYPES,
    Direction,
    Entity,
    ImpactEntry,
    Link,
    TopologyEdge,
)
from trace_ledger.queries import get_incoming_links, get_outgoing_links

logger = structlog.get_logger()

COVERED_CATEGORY = "customer"
COVERED_CLASSIFICATION = "need"


def find_orphans(entities: EntitySource, links: Iterable[Link], edges: Iterable[TopologyEdge]) -> list[Entity]:
    """Return entities touched by neither a link nor a topology edge.

    Floating connectors are UI placeholders and are never reported.
    """
    touched: set[str] = set()
    for link in links:
        touched.add(link.source.item_id)
        touched.add(link.target.item_id)
    for edge in edges:
        touched.add(edge.source_id)
        touched.add(edge.target_id)

    orphans = [e for e in iter_entities(entities) if e.id not in touched and not e.floating_connector]
    logger.debug("Found orphans", count=len(orphans), touched=len(touched))
    return orphans


def find_circular_deps(links: Iterable[Link]) -> list[list[str]]:
    """Find cycles among hierarchical links (derives, refines, implements).

    Each cycle is the DFS path from the first occurrence of the repeated node
    up to and including the repeat, e.g. ``["A", "B", "C", "A"]``. A cycle is
    reported once per closing edge reached; the shared ``visited`` set keeps
    later roots from walking the same component again.
    """
    links = list(links)
    adjacency: dict[str, list[str]] = {}
    for link in links:
        if link.link_type in HIERARCHICAL_LINK_TYPES:
            adjacency.setdefault(link.source.item_id, []).append(link.target.item_id)

    visited: set[str] = set()
    on_stack: set[str] = set()
    path: list[str] = []
    cycles: list[list[str]] = []

    def enter(node: str, frames: list[tuple[str, Iterator[str]]]) -> None:
        visited.add(node)
        on_stack.add(node)
        path.append(node)
        frames.append((node, iter(adjacency.get(node, []))))

    def dfs(root: str) -> None:
        # Explicit frame stack; long derivation chains must not hit the recursion limit.
        frames: list[tuple[str, Iterator[str]]] = []
        enter(root, frames)
        while frames:
            node, targets = frames[-1]
            target = next(targets, None)
            if target is None:
                frames.pop()
                path.pop()
                on_stack.discard(node)
            elif target not in visited:
                enter(target, frames)
            elif target in on_stack:
                cycles.append(path[path.index(target) :] + [target])

    # Roots in order of first appearance as a source, over all link kinds.
    for root in dict.fromkeys(link.source.item_id for link in links):
        if root not in visited:
            dfs(root)

    logger.debug("Cycle search completed", nodes=len(visited), cycles=len(cycles))
    return cycles


def _needs_coverage(entity: Entity) -> bool:
    return entity.category == COVERED_CATEGORY or entity.classification == COVERED_CLASSIFICATION


def find_uncovered_requirements(entities: EntitySource, links: Iterable[Link]) -> list[Entity]:
    """Customer requirements and needs with no satisfying outgoing link.

    Only satisfies, implements and derives count; an entity with nothing but
    ``relates`` links is still uncovered.
    """
    covered = {link.source.item_id for link in links if link.link_type in SATISFYING_LINK_TYPES}
    uncovered = [e for e in iter_entities(entities) if _needs_coverage(e) and e.id not in covered]
    logger.debug("Coverage analysis completed", uncovered=len(uncovered))
    return uncovered


def get_impact_analysis(item_id: str, links: Iterable[Link]) -> list[ImpactEntry]:
    """List the neighbours of ``item_id`` across every link touching it.

    Pin state is reported for the side that belongs to ``item_id``, which is
    what would need re-pinning if its version changes. Incoming entries come
    first, then outgoing ones.
    """
    links = list(links)
    affected = [
        ImpactEntry(
            link_id=link.id,
            affected_node_id=link.source.item_id,
            direction=Direction.INCOMING,
            is_pinned=link.target.is_pinned,
            current_pinned_version=link.target.version,
            link_type=link.link_type,
        )
        for link in get_incoming_links(links, item_id)
    ]
    affected.extend(
        ImpactEntry(
            link_id=link.id,
            affected_node_id=link.target.item_id,
            direction=Direction.OUTGOING,
            is_pinned=link.source.is_pinned,
            current_pinned_version=link.source.version,
            link_type=link.link_type,
        )
        for link in get_outgoing_links(links, item_id)
    )
    return affected


def baseline_all_links(links: Iterable[Link], entities: EntitySource) -> list[Link]:
    """Pin every floating side to the catalog's current version.

    Returns a new list in which changed links are replaced by updated
    copies. Sides that are already pinned, and sides whose
    entity is missing from the catalog, are left as they are. Running this
    twice against the same catalog changes nothing the second time.
    """
    catalog = index_entities(entities)
    baselined = []
    for link in links:
        changes = {}
        for name in ("source", "target"):
            endpoint = getattr(link, name)
            entity = catalog.get(endpoint.item_id)
            if endpoint.version is None and entity is not None:
                changes[name] = dataclasses.replace(endpoint, version=entity.current_version)
        baselined.append(dataclasses.replace(link, **changes) if changes else link)
    return baselined
