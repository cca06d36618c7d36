"""Tests for catalog snapshots and entity indexing."""

from trace_ledger.catalog import Catalog, index_entities, iter_entities
from trace_ledger.models import Entity


def test_catalog_get_by_id() -> None:
    """Test lookups by id, including a miss."""
    catalog = Catalog(entities=[Entity(id="a", current_version="2"), Entity(id="b")])
    assert catalog.get("a").current_version == "2"
    assert catalog.get("b").id == "b"
    assert catalog.get("c") is None


def test_catalog_get_in_large_catalog() -> None:
    """Test that every entity of a large catalog resolves to itself."""
    entities = [Entity(id=f"e{i}", current_version=str(i)) for i in range(5000)]
    catalog = Catalog(entities=entities)
    assert all(catalog.get(e.id) is e for e in entities)
    assert catalog.get("e5000") is None


def test_catalog_equality_ignores_index() -> None:
    """Test that two catalogs with the same contents compare equal."""
    assert Catalog(entities=[Entity(id="a")]) == Catalog(entities=[Entity(id="a")])


def test_index_and_iter_accept_mappings() -> None:
    """Test that a ready-made id mapping is accepted as an entity source."""
    entities = {"x": Entity(id="x"), "y": Entity(id="y")}
    assert index_entities(entities) == entities
    assert [e.id for e in iter_entities(entities)] == ["x", "y"]
    assert list(index_entities(list(entities.values()))) == ["x", "y"]
