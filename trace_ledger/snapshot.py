"""YAML snapshot files for links and for the entity catalog.

Links file::

    links:
      - id: rl-1700000000000-1
        source: {item_id: REQ-1, version: "1.0"}
        target: {item_id: SYS-4, version: null}
        link_type: satisfies
        status: active
        metadata: {created_at: ..., created_by: alice, notes: ""}

Catalog file::

    entities:
      - id: REQ-1
        version: "1.1"
        category: customer
    edges:
      - {source: REQ-1, target: SYS-4}
"""

from pathlib import Path
from typing import Any

import structlog
import yaml

from trace_ledger.catalog import Catalog
from trace_ledger.models import DEFAULT_VERSION, Entity, Link, TopologyEdge

logger = structlog.get_logger()


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error("Failed to read snapshot", path=str(path), error=str(e))
        raise ValueError(f"Failed to read {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at the top of {path}")
    return data


def load_links(path: Path) -> list[Link]:
    """Load links from a snapshot file. A missing file is an empty ledger."""
    path = Path(path)
    if not path.exists():
        logger.debug("Links file does not exist, starting empty", path=str(path))
        return []

    data = _read_yaml(path)
    try:
        links = [Link.from_dict(item) for item in data.get("links") or []]
    except (KeyError, TypeError, ValueError) as e:
        logger.error("Malformed links file", path=str(path), error=str(e))
        raise ValueError(f"Malformed link record in {path}: {e}") from e
    logger.debug("Links loaded", path=str(path), count=len(links))
    return links


def save_links(path: Path, links: list[Link]) -> None:
    """Write links to a snapshot file, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(path, "w") as f:
            yaml.safe_dump(
                {"links": [link.to_dict() for link in links]},
                f,
                default_flow_style=False,
                sort_keys=False,
            )
    except OSError as e:
        logger.error("Failed to save links", path=str(path), error=str(e))
        raise ValueError(f"Failed to save links to {path}: {e}") from e
    logger.debug("Links saved", path=str(path), count=len(links))


def _entity_from_dict(item: dict[str, Any]) -> Entity:
    version = item.get("version", item.get("current_version"))
    return Entity(
        id=str(item["id"]),
        current_version=DEFAULT_VERSION if version is None else str(version),
        category=item.get("category") or "",
        classification=item.get("classification") or "",
        label=item.get("label") or "",
        floating_connector=bool(item.get("floating_connector", False)),
    )


def load_catalog(path: Path) -> Catalog:
    """Load entities and topology edges. A missing file is an empty catalog."""
    path = Path(path)
    if not path.exists():
        logger.debug("Catalog file does not exist, using empty catalog", path=str(path))
        return Catalog()

    data = _read_yaml(path)
    try:
        entities = [_entity_from_dict(item) for item in data.get("entities") or []]
        edges = [
            TopologyEdge(source_id=str(item["source"]), target_id=str(item["target"]))
            for item in data.get("edges") or []
        ]
    except (KeyError, TypeError) as e:
        logger.error("Malformed catalog file", path=str(path), error=str(e))
        raise ValueError(f"Malformed catalog entry in {path}: {e}") from e
    logger.debug("Catalog loaded", path=str(path), entities=len(entities), edges=len(edges))
    return Catalog(entities=entities, edges=edges)
