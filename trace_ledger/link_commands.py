"""Link management commands for the trace-ledger CLI."""

from typing import Literal

from cyclopts import App

from trace_ledger.models import Link

link_app = App(name="link", help="Manage traceability links between entities")

LinkTypeName = Literal["satisfies", "derives", "refines", "conflicts", "relates", "implements", "verifies", "reuses"]
LinkStatusName = Literal["active", "needsReview", "proposed", "deprecated", "broken"]


def _format_endpoint(item_id: str, version: str | None) -> str:
    return f"{item_id}@{version}" if version is not None else f"{item_id} (floating)"


def _format_link(link: Link) -> str:
    return (
        f"{link.id}: {_format_endpoint(link.source.item_id, link.source.version)}"
        f" --[{link.link_type.value}]--> {_format_endpoint(link.target.item_id, link.target.version)}"
        f" ({link.status.value})"
    )


@link_app.command
def add(
    source_id: str,
    target_id: str,
    type: LinkTypeName = "relates",
    source_version: str | None = None,
    target_version: str | None = None,
    notes: str = "",
    created_by: str | None = None,
) -> None:
    """Add a link from a source entity to a target entity.

    Args:
        source_id: Entity the link starts from
        target_id: Entity the link points to
        type: Link kind
        source_version: Pin the source to this version; floating if omitted
        target_version: Pin the target to this version; floating if omitted
        notes: Free-form notes stored with the link
        created_by: Actor to record; defaults to the configured actor
    """
    from trace_ledger.cli import open_ledger, save_ledger
    from trace_ledger.config import get_config

    config = get_config()
    store = open_ledger(config)
    link = store.add_link(
        source_id,
        source_version,
        target_id,
        target_version,
        link_type=type,
        notes=notes,
        created_by=created_by or config.actor(),
    )
    save_ledger(store, config)
    print(f"Added link {_format_link(link)}")


@link_app.command
def remove(*link_ids: str) -> None:
    """Remove one or more links by id."""
    from trace_ledger.cli import open_ledger, save_ledger

    store = open_ledger()
    removed = 0
    for link_id in link_ids:
        if store.remove_link(link_id):
            removed += 1
        else:
            print(f"Link {link_id} not found")
    save_ledger(store)
    print(f"Removed {removed} link(s)")


@link_app.command(name="list")
def list_links(
    item_id: str | None = None,
    direction: Literal["both", "incoming", "outgoing"] = "both",
    type: LinkTypeName | None = None,
    status: LinkStatusName | None = None,
) -> None:
    """List links, optionally only those touching one entity."""
    from trace_ledger.cli import open_ledger
    from trace_ledger.queries import filter_links

    store = open_ledger()
    if item_id is None:
        links = store.links
    elif direction == "incoming":
        links = store.get_incoming_links(item_id)
    elif direction == "outgoing":
        links = store.get_outgoing_links(item_id)
    else:
        links = store.get_links_for_node(item_id)
    links = filter_links(links, link_type=type, status=status)

    if not links:
        print("No links found" if item_id is None else f"No links found for entity {item_id}")
        return

    print(f"Found {len(links)} link(s):\n")
    for link in links:
        print(f"  {_format_link(link)}")


@link_app.command
def show(link_id: str) -> None:
    """Display a single link with its metadata."""
    from trace_ledger.cli import open_ledger

    link = open_ledger().get_link(link_id)
    if link is None:
        print(f"Link {link_id} not found")
        return

    meta = link.metadata
    print(f"Link: {link.id}")
    print(f"Type: {link.link_type.label}")
    print(f"Source: {_format_endpoint(link.source.item_id, link.source.version)}")
    print(f"Target: {_format_endpoint(link.target.item_id, link.target.version)}")
    print(f"Status: {link.status.value}")
    print(f"Created: {meta.created_at} by {meta.created_by}")
    if meta.notes:
        print(f"Notes: {meta.notes}")
    if meta.verified_at:
        print(f"Verified: {meta.verified_at} by {meta.verified_by}")
    if meta.last_reviewed_at:
        print(f"Reviewed: {meta.last_reviewed_at}")


@link_app.command
def status(link_id: str, value: LinkStatusName) -> None:
    """Set the status of a link."""
    from trace_ledger.cli import open_ledger, save_ledger

    store = open_ledger()
    if not store.update_link_status(link_id, value):
        print(f"Link {link_id} not found")
        return
    save_ledger(store)
    print(f"Link {link_id} is now {value}")


@link_app.command
def pin(link_id: str, side: Literal["source", "target"], version: str | None = None) -> None:
    """Pin one side of a link to a version.

    Args:
        link_id: Link to pin
        side: Which end of the link to pin
        version: Version to pin to; defaults to the entity's current version in the catalog
    """
    from trace_ledger.cli import open_catalog, open_ledger, save_ledger

    store = open_ledger()
    link = store.get_link(link_id)
    if link is None:
        print(f"Link {link_id} not found")
        return

    if version is None:
        item_id = getattr(link, side).item_id
        entity = open_catalog().get(item_id)
        if entity is None:
            print(f"Entity {item_id} is not in the catalog; pass --version explicitly")
            return
        version = entity.current_version

    store.pin_link(link_id, side, version)
    save_ledger(store)
    print(f"Pinned {side} of {link_id} to {version}")


@link_app.command
def unpin(link_id: str, side: Literal["source", "target"]) -> None:
    """Make one side of a link floating again."""
    from trace_ledger.cli import open_ledger, save_ledger

    store = open_ledger()
    if not store.unpin_link(link_id, side):
        print(f"Link {link_id} not found")
        return
    save_ledger(store)
    print(f"Unpinned {side} of {link_id}")


@link_app.command
def verify(link_id: str, verified_by: str | None = None) -> None:
    """Mark a link as verified by the current actor."""
    from trace_ledger.cli import open_ledger, save_ledger
    from trace_ledger.config import get_config

    config = get_config()
    store = open_ledger(config)
    actor = verified_by or config.actor()
    if not store.verify_link(link_id, actor):
        print(f"Link {link_id} not found")
        return
    save_ledger(store, config)
    print(f"Link {link_id} verified by {actor}")
