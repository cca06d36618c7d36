"""Requirements traceability ledger."""

from trace_ledger.analysis import (
    baseline_all_links,
    find_circular_deps,
    find_orphans,
    find_uncovered_requirements,
    get_impact_analysis,
)
from trace_ledger.health import HealthReport, run_health_checks
from trace_ledger.models import Endpoint, Entity, Link, LinkStatus, LinkType, MutationResult, Side, TopologyEdge
from trace_ledger.store import LinkStore

__all__ = [
    "Endpoint",
    "Entity",
    "HealthReport",
    "Link",
    "LinkStatus",
    "LinkStore",
    "LinkType",
    "MutationResult",
    "Side",
    "TopologyEdge",
    "baseline_all_links",
    "find_circular_deps",
    "find_orphans",
    "find_uncovered_requirements",
    "get_impact_analysis",
    "run_health_checks",
]
