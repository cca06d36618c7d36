"""Read-only lookups over a collection of links.

All functions are pure filters that keep insertion order.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from trace_ledger.models import Link, LinkStatus, LinkType


def get_links_for_node(links: Iterable[Link], item_id: str) -> list[Link]:
    """Links where ``item_id`` is the source or the target."""
    return [link for link in links if link.source.item_id == item_id or link.target.item_id == item_id]


def get_incoming_links(links: Iterable[Link], item_id: str) -> list[Link]:
    """Links where ``item_id`` is the target."""
    return [link for link in links if link.target.item_id == item_id]


def get_outgoing_links(links: Iterable[Link], item_id: str) -> list[Link]:
    """Links where ``item_id`` is the source."""
    return [link for link in links if link.source.item_id == item_id]


def filter_links(
    links: Iterable[Link],
    link_type: LinkType | str | None = None,
    status: LinkStatus | str | None = None,
) -> list[Link]:
    """Narrow links down by kind and/or status. ``None`` matches everything."""
    wanted_type = LinkType(link_type) if link_type is not None else None
    wanted_status = LinkStatus(status) if status is not None else None
    return [
        link
        for link in links
        if (wanted_type is None or link.link_type is wanted_type)
        and (wanted_status is None or link.status is wanted_status)
    ]


@dataclass
class LinkStats:
    """Headline counts for a link collection."""

    total: int = 0
    active: int = 0
    needs_review: int = 0
    floating: int = 0
    pinned: int = 0


def summarize_links(links: Iterable[Link]) -> LinkStats:
    """Count links by status and pin state.

    A link counts as floating when either side floats, and as pinned only
    when both sides are pinned.
    """
    stats = LinkStats()
    for link in links:
        stats.total += 1
        if link.status is LinkStatus.ACTIVE:
            stats.active += 1
        elif link.status is LinkStatus.NEEDS_REVIEW:
            stats.needs_review += 1
        if link.source.is_pinned and link.target.is_pinned:
            stats.pinned += 1
        else:
            stats.floating += 1
    return stats
