"""Health checks for links against a catalog snapshot.

Checks are read-only. A single link can yield several issues:

- broken: the source or target entity is missing from the catalog (critical)
- versionDrift: a pinned side no longer matches the entity's current version (warning)
- selfLink: source and target are the same entity (warning)

A link's ``status`` is never consulted or changed here. A link can be
``active`` and still be reported as broken, and vice versa.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import structlog

from trace_ledger.catalog import EntitySource, index_entities
from trace_ledger.models import Entity, HealthIssue, IssueType, Link, Severity, Side

logger = structlog.get_logger()


def _check_missing(link: Link, side: Side, catalog: dict[str, Entity]) -> HealthIssue | None:
    endpoint = link.endpoint(side)
    if endpoint.item_id in catalog:
        return None
    return HealthIssue(
        type=IssueType.BROKEN,
        severity=Severity.CRITICAL,
        link_id=link.id,
        message=f"{side.value.capitalize()} node {endpoint.item_id} no longer exists",
        side=side,
    )


def _check_drift(link: Link, side: Side, catalog: dict[str, Entity]) -> HealthIssue | None:
    endpoint = link.endpoint(side)
    entity = catalog.get(endpoint.item_id)
    if endpoint.version is None or entity is None:
        return None
    # Exact string comparison, "1.0" and "1.00" are different versions.
    if endpoint.version == entity.current_version:
        return None
    return HealthIssue(
        type=IssueType.VERSION_DRIFT,
        severity=Severity.WARNING,
        link_id=link.id,
        message=(
            f"{side.value.capitalize()} pinned to v{endpoint.version}, current is v{entity.current_version}"
        ),
        side=side,
    )


def check_link(link: Link, catalog: dict[str, Entity]) -> list[HealthIssue]:
    """Run every check on one link against an indexed catalog."""
    issues = []
    for side in Side:
        issue = _check_missing(link, side, catalog)
        if issue:
            issues.append(issue)
    for side in Side:
        issue = _check_drift(link, side, catalog)
        if issue:
            issues.append(issue)
    if link.source.item_id == link.target.item_id:
        issues.append(
            HealthIssue(
                type=IssueType.SELF_LINK,
                severity=Severity.WARNING,
                link_id=link.id,
                message="Node links to itself",
            )
        )
    return issues


def run_health_checks(links: Iterable[Link], entities: EntitySource) -> list[HealthIssue]:
    """Check every link against the given catalog snapshot."""
    catalog = index_entities(entities)
    issues: list[HealthIssue] = []
    checked = 0
    for link in links:
        issues.extend(check_link(link, catalog))
        checked += 1
    logger.debug("Health checks completed", links=checked, entities=len(catalog), issues=len(issues))
    return issues


@dataclass
class HealthReport:
    """Aggregated health check results."""

    issues: list[HealthIssue] = field(default_factory=list)

    @classmethod
    def build(cls, links: Iterable[Link], entities: EntitySource) -> "HealthReport":
        return cls(issues=run_health_checks(links, entities))

    @property
    def critical(self) -> int:
        return sum(1 for i in self.issues if i.severity is Severity.CRITICAL)

    @property
    def warnings(self) -> int:
        return sum(1 for i in self.issues if i.severity is Severity.WARNING)

    @property
    def is_healthy(self) -> bool:
        return not self.issues

    def of_type(self, issue_type: IssueType) -> list[HealthIssue]:
        return [i for i in self.issues if i.type is issue_type]

    def by_link(self) -> dict[str, list[HealthIssue]]:
        grouped: dict[str, list[HealthIssue]] = {}
        for issue in self.issues:
            grouped.setdefault(issue.link_id, []).append(issue)
        return grouped

    def to_dict(self) -> dict[str, Any]:
        return {
            "healthy": self.is_healthy,
            "summary": {
                "issues": len(self.issues),
                "critical": self.critical,
                "warnings": self.warnings,
            },
            "issues": [issue.to_dict() for issue in self.issues],
        }
