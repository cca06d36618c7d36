"""Shared fixtures for trace-ledger tests."""

from pathlib import Path

import pytest
import structlog

from trace_ledger.models import Entity, TopologyEdge


@pytest.fixture(autouse=True)
def quiet_logging() -> None:
    """Keep structlog output out of captured stdout."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(min_level="critical"))


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in an isolated working directory with an isolated home."""
    home = tmp_path / "home"
    home.mkdir()
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("TRACE_LEDGER_ACTOR", raising=False)
    monkeypatch.chdir(project)
    return project


@pytest.fixture
def entities() -> list[Entity]:
    """A small catalog: one customer requirement, one system, one test case."""
    return [
        Entity(id="n1", current_version="1.1", category="customer", label="Pump shall start"),
        Entity(id="n2", current_version="2.0", category="system"),
        Entity(id="n3", current_version="1.0", category="test"),
    ]


@pytest.fixture
def edges() -> list[TopologyEdge]:
    return [TopologyEdge(source_id="n2", target_id="n3")]
