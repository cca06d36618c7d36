"""In-memory link store: the single source of truth for links."""

import dataclasses
import itertools
import time
from collections.abc import Iterable, Iterator
from typing import Any

import structlog

from trace_ledger import queries
from trace_ledger.analysis import baseline_all_links
from trace_ledger.catalog import EntitySource
from trace_ledger.models import (
    Endpoint,
    Link,
    LinkMetadata,
    LinkStatus,
    LinkType,
    MutationResult,
    Side,
    utc_now,
)

logger = structlog.get_logger()

UPDATABLE_FIELDS = frozenset({"source", "target", "link_type", "status", "metadata"})


def _coerce(name: str, value: Any, model: type[Endpoint] | type[LinkMetadata]) -> Any:
    """Accept a model instance or its dict form for an update field."""
    if isinstance(value, model):
        return value
    if isinstance(value, dict):
        try:
            return model.from_dict(value)
        except KeyError as e:
            raise ValueError(f"Link field {name} is missing {e}") from e
    raise ValueError(f"Link field {name} must be a {model.__name__} or a dict, got {type(value).__name__}")


class LinkStore:
    """Ordered collection of links with CRUD and pin/unpin operations.

    The store never looks at the entity catalog. Operations that need it
    (baseline) take a catalog snapshot as an argument.

    Mutators addressed by link id never raise for unknown ids. They return
    ``MutationResult.NOT_FOUND`` instead, and repeating them is harmless.

    There is no internal locking. Hosts sharing a store between threads must
    serialize mutations themselves.
    """

    def __init__(self, links: Iterable[Link] | None = None) -> None:
        """Initialize the store.

        Args:
            links: Existing links to load, e.g. from a snapshot file
        """
        self._links: list[Link] = []
        self._issued_ids: set[str] = set()
        self._counter = itertools.count(1)
        for link in links or []:
            self._links.append(link)
            self._issued_ids.add(link.id)
        logger.debug("Link store initialized", count=len(self._links))

    def __len__(self) -> int:
        return len(self._links)

    def __iter__(self) -> Iterator[Link]:
        return iter(list(self._links))

    @property
    def links(self) -> list[Link]:
        """A copy of the collection in insertion order."""
        return list(self._links)

    def _next_id(self) -> str:
        while True:
            link_id = f"rl-{int(time.time() * 1000)}-{next(self._counter)}"
            if link_id not in self._issued_ids:
                self._issued_ids.add(link_id)
                return link_id

    def _find(self, link_id: str) -> int | None:
        for index, link in enumerate(self._links):
            if link.id == link_id:
                return index
        return None

    def get_link(self, link_id: str) -> Link | None:
        index = self._find(link_id)
        return None if index is None else self._links[index]

    def add_link(
        self,
        source_item_id: str,
        source_version: str | None,
        target_item_id: str,
        target_version: str | None,
        link_type: LinkType | str = LinkType.RELATES,
        notes: str = "",
        created_by: str = "unknown",
    ) -> Link:
        """Create a link and append it.

        No check is made that either entity exists; that is left to health
        checks. Several links between the same pair of entities are allowed.

        Raises:
            ValueError: If ``link_type`` is not a known link kind
        """
        link = Link(
            id=self._next_id(),
            source=Endpoint(item_id=source_item_id, version=source_version),
            target=Endpoint(item_id=target_item_id, version=target_version),
            link_type=LinkType(link_type),
            status=LinkStatus.ACTIVE,
            metadata=LinkMetadata(created_at=utc_now(), created_by=created_by, notes=notes),
        )
        self._links.append(link)
        logger.info(
            "Link added",
            link_id=link.id,
            source=source_item_id,
            target=target_item_id,
            link_type=link.link_type.value,
        )
        return link

    def remove_link(self, link_id: str) -> MutationResult:
        """Remove a link. Its id is never handed out again."""
        index = self._find(link_id)
        if index is None:
            logger.warning("Link not found for removal", link_id=link_id)
            return MutationResult.NOT_FOUND
        del self._links[index]
        logger.info("Link removed", link_id=link_id)
        return MutationResult.UPDATED

    def update_link(self, link_id: str, **fields: Any) -> MutationResult:
        """Shallow-merge ``fields`` into a link.

        ``source``, ``target`` and ``metadata`` may be given as model
        instances or as their ``to_dict`` form; either replaces the whole field.

        Raises:
            ValueError: If a field is not updatable (``id`` included) or its value has the wrong shape
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update link field(s): {', '.join(sorted(unknown))}")
        if "link_type" in fields:
            fields["link_type"] = LinkType(fields["link_type"])
        if "status" in fields:
            fields["status"] = LinkStatus(fields["status"])
        for name in ("source", "target"):
            if name in fields:
                fields[name] = _coerce(name, fields[name], Endpoint)
        if "metadata" in fields:
            fields["metadata"] = _coerce("metadata", fields["metadata"], LinkMetadata)

        index = self._find(link_id)
        if index is None:
            logger.warning("Link not found for update", link_id=link_id)
            return MutationResult.NOT_FOUND
        self._links[index] = dataclasses.replace(self._links[index], **fields)
        logger.info("Link updated", link_id=link_id, fields=sorted(fields))
        return MutationResult.UPDATED

    def update_link_status(self, link_id: str, status: LinkStatus | str) -> MutationResult:
        return self.update_link(link_id, status=status)

    def _set_version(self, link_id: str, side: Side | str, version: str | None) -> MutationResult:
        side = Side(side)
        link = self.get_link(link_id)
        if link is None:
            logger.warning("Link not found for pin change", link_id=link_id, side=side.value)
            return MutationResult.NOT_FOUND
        endpoint = dataclasses.replace(link.endpoint(side), version=version)
        return self.update_link(link_id, **{side.value: endpoint})

    def pin_link(self, link_id: str, side: Side | str, version: str) -> MutationResult:
        """Freeze one side of a link to ``version``. Pinning again overwrites."""
        logger.debug("Pinning link", link_id=link_id, side=Side(side).value, version=version)
        return self._set_version(link_id, side, version)

    def unpin_link(self, link_id: str, side: Side | str) -> MutationResult:
        """Make one side of a link float again."""
        logger.debug("Unpinning link", link_id=link_id, side=Side(side).value)
        return self._set_version(link_id, side, None)

    def verify_link(self, link_id: str, verified_by: str) -> MutationResult:
        """Record who verified a link and when."""
        link = self.get_link(link_id)
        if link is None:
            logger.warning("Link not found for verification", link_id=link_id)
            return MutationResult.NOT_FOUND
        metadata = dataclasses.replace(link.metadata, verified_at=utc_now(), verified_by=verified_by)
        return self.update_link(link_id, metadata=metadata)

    def mark_reviewed(self, link_id: str) -> MutationResult:
        """Record that a link was reviewed just now."""
        link = self.get_link(link_id)
        if link is None:
            logger.warning("Link not found for review", link_id=link_id)
            return MutationResult.NOT_FOUND
        metadata = dataclasses.replace(link.metadata, last_reviewed_at=utc_now())
        return self.update_link(link_id, metadata=metadata)

    def baseline(self, entities: EntitySource) -> int:
        """Pin every floating side that resolves in ``entities``.

        Returns:
            Number of sides that were pinned
        """
        updated = baseline_all_links(self._links, entities)
        pinned = sum(
            (not old.source.is_pinned and new.source.is_pinned) + (not old.target.is_pinned and new.target.is_pinned)
            for old, new in zip(self._links, updated)
        )
        self._links = updated
        logger.info("Baseline applied", links=len(updated), pinned_sides=pinned)
        return pinned

    def get_links_for_node(self, item_id: str) -> list[Link]:
        return queries.get_links_for_node(self._links, item_id)

    def get_incoming_links(self, item_id: str) -> list[Link]:
        return queries.get_incoming_links(self._links, item_id)

    def get_outgoing_links(self, item_id: str) -> list[Link]:
        return queries.get_outgoing_links(self._links, item_id)
