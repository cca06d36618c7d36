"""Data models for the trace ledger."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

DEFAULT_VERSION = "1.0"


class LinkType(str, Enum):
    """Semantic kind of a link, read source -> target."""

    SATISFIES = "satisfies"
    DERIVES = "derives"
    REFINES = "refines"
    CONFLICTS = "conflicts"
    RELATES = "relates"
    IMPLEMENTS = "implements"
    VERIFIES = "verifies"
    REUSES = "reuses"

    @property
    def label(self) -> str:
        return LINK_TYPE_INFO[self][0]

    @property
    def description(self) -> str:
        return LINK_TYPE_INFO[self][1]


LINK_TYPE_INFO: dict[LinkType, tuple[str, str]] = {
    LinkType.SATISFIES: ("Satisfies", "Source requirement is satisfied by target"),
    LinkType.DERIVES: ("Derives from", "Source is derived from target"),
    LinkType.REFINES: ("Refines", "Source refines/details target"),
    LinkType.CONFLICTS: ("Conflicts with", "Source conflicts with target"),
    LinkType.RELATES: ("Related to", "General relationship"),
    LinkType.IMPLEMENTS: ("Implements", "Source implements target"),
    LinkType.VERIFIES: ("Verifies", "Source verifies target"),
    LinkType.REUSES: ("Reuses", "Source reuses target requirement"),
}

# Kinds that form a hierarchy; only these are searched for cycles.
HIERARCHICAL_LINK_TYPES = frozenset({LinkType.DERIVES, LinkType.REFINES, LinkType.IMPLEMENTS})

# Kinds that count as downstream coverage of a customer need.
SATISFYING_LINK_TYPES = frozenset({LinkType.SATISFIES, LinkType.IMPLEMENTS, LinkType.DERIVES})


class LinkStatus(str, Enum):
    """Human-curated lifecycle state of a link."""

    ACTIVE = "active"
    NEEDS_REVIEW = "needsReview"
    PROPOSED = "proposed"
    DEPRECATED = "deprecated"
    BROKEN = "broken"


class Side(str, Enum):
    """One end of a link."""

    SOURCE = "source"
    TARGET = "target"


class MutationResult(str, Enum):
    """Outcome of a store mutation addressed by link id."""

    UPDATED = "updated"
    NOT_FOUND = "not_found"

    def __bool__(self) -> bool:
        return self is MutationResult.UPDATED


def utc_now() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Endpoint:
    """A weak reference to an entity, optionally pinned to a version.

    ``version=None`` means floating: the endpoint follows whatever the
    catalog currently reports for ``item_id``.
    """

    item_id: str
    version: str | None = None

    @property
    def is_pinned(self) -> bool:
        return self.version is not None

    def to_dict(self) -> dict[str, Any]:
        return {"item_id": self.item_id, "version": self.version}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Endpoint":
        version = data.get("version")
        return cls(item_id=str(data["item_id"]), version=None if version is None else str(version))


@dataclass
class LinkMetadata:
    """Provenance of a link. Never interpreted by the analyzers."""

    created_at: str = field(default_factory=utc_now)
    created_by: str = "unknown"
    notes: str = ""
    verified_at: str | None = None
    verified_by: str | None = None
    last_reviewed_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "created_at": self.created_at,
            "created_by": self.created_by,
            "notes": self.notes,
            "verified_at": self.verified_at,
            "verified_by": self.verified_by,
            "last_reviewed_at": self.last_reviewed_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LinkMetadata":
        return cls(
            created_at=data.get("created_at") or utc_now(),
            created_by=data.get("created_by", "unknown"),
            notes=data.get("notes") or "",
            verified_at=data.get("verified_at"),
            verified_by=data.get("verified_by"),
            last_reviewed_at=data.get("last_reviewed_at"),
        )


@dataclass
class Link:
    """A typed, directional relationship between two entity references."""

    id: str
    source: Endpoint
    target: Endpoint
    link_type: LinkType = LinkType.RELATES
    status: LinkStatus = LinkStatus.ACTIVE
    metadata: LinkMetadata = field(default_factory=LinkMetadata)

    def endpoint(self, side: Side) -> Endpoint:
        return self.source if side is Side.SOURCE else self.target

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source.to_dict(),
            "target": self.target.to_dict(),
            "link_type": self.link_type.value,
            "status": self.status.value,
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Link":
        return cls(
            id=str(data["id"]),
            source=Endpoint.from_dict(data["source"]),
            target=Endpoint.from_dict(data["target"]),
            link_type=LinkType(data.get("link_type", LinkType.RELATES.value)),
            status=LinkStatus(data.get("status", LinkStatus.ACTIVE.value)),
            metadata=LinkMetadata.from_dict(data.get("metadata") or {}),
        )


@dataclass
class Entity:
    """A row of the external entity catalog, as seen at one point in time."""

    id: str
    current_version: str = DEFAULT_VERSION
    category: str = ""
    classification: str = ""
    label: str = ""
    floating_connector: bool = False


@dataclass(frozen=True)
class TopologyEdge:
    """A structural (non-link) connection from the topology store."""

    source_id: str
    target_id: str


class IssueType(str, Enum):
    BROKEN = "broken"
    VERSION_DRIFT = "versionDrift"
    SELF_LINK = "selfLink"


class Severity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"


@dataclass
class HealthIssue:
    """A diagnostic finding about a single link."""

    type: IssueType
    severity: Severity
    link_id: str
    message: str
    side: Side | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "link_id": self.link_id,
            "message": self.message,
            "side": self.side.value if self.side else None,
        }


class Direction(str, Enum):
    INCOMING = "incoming"
    OUTGOING = "outgoing"


@dataclass
class ImpactEntry:
    """One neighbour that may need attention when an entity's version changes."""

    link_id: str
    affected_node_id: str
    direction: Direction
    is_pinned: bool
    current_pinned_version: str | None
    link_type: LinkType
