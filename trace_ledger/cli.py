"""CLI for trace-ledger."""

import json
from typing import Annotated, Literal

import structlog
from cyclopts import App, Parameter

from trace_ledger.analysis import find_circular_deps, find_orphans, find_uncovered_requirements, get_impact_analysis
from trace_ledger.catalog import Catalog
from trace_ledger.config import Config, get_config
from trace_ledger.config_commands import config_app
from trace_ledger.health import HealthReport
from trace_ledger.link_commands import link_app
from trace_ledger.queries import summarize_links
from trace_ledger.snapshot import load_catalog, load_links, save_links
from trace_ledger.store import LinkStore

logger = structlog.get_logger()

app = App(
    help="Trace Ledger - Requirements traceability links between model entities",
)

app.command(link_app)
app.command(config_app)


def configure_logging(log_level: str) -> None:
    """Configure structlog with the specified log level."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(min_level=log_level.lower()))


def open_ledger(config: Config | None = None) -> LinkStore:
    """Load the configured links file into a store."""
    config = config or get_config()
    return LinkStore(load_links(config.ledger_path()))


def save_ledger(store: LinkStore, config: Config | None = None) -> None:
    config = config or get_config()
    save_links(config.ledger_path(), store.links)


def open_catalog(config: Config | None = None) -> Catalog:
    """Load the configured entity catalog snapshot."""
    config = config or get_config()
    return load_catalog(config.catalog_path())


@app.command
def health(
    as_json: Annotated[bool, Parameter(name="--json")] = False,
) -> None:
    """Check every link against the entity catalog."""
    config = get_config()
    store = open_ledger(config)
    report = HealthReport.build(store.links, open_catalog(config).entities)

    if as_json:
        print(json.dumps(report.to_dict(), indent=2))
        return

    if report.is_healthy:
        print(f"All {len(store)} link(s) are healthy")
        return

    print(f"Found {len(report.issues)} issue(s): {report.critical} critical, {report.warnings} warning(s)\n")
    for issue in report.issues:
        marker = "✗" if issue.severity.value == "critical" else "!"
        print(f"{marker} [{issue.type.value}] {issue.link_id}: {issue.message}")


@app.command
def orphans() -> None:
    """List entities with no links and no topology edges."""
    config = get_config()
    catalog = open_catalog(config)
    found = find_orphans(catalog.entities, open_ledger(config).links, catalog.edges)

    if not found:
        print("No orphan entities found")
        return

    print(f"Found {len(found)} orphan entity(ies):\n")
    for entity in found:
        label = f" {entity.label}" if entity.label else ""
        print(f"  - {entity.id}{label}")


@app.command
def cycles() -> None:
    """Find cycles among derives, refines and implements links."""
    found = find_circular_deps(open_ledger().links)

    if not found:
        print("No cycles found")
        return

    print(f"Found {len(found)} cycle(s):\n")
    for i, cycle in enumerate(found, 1):
        print(f"{i}. {' -> '.join(cycle)}")


@app.command
def coverage() -> None:
    """List customer requirements and needs with no satisfying link."""
    config = get_config()
    uncovered = find_uncovered_requirements(open_catalog(config).entities, open_ledger(config).links)

    if not uncovered:
        print("All customer requirements are covered")
        return

    print(f"Found {len(uncovered)} uncovered requirement(s):\n")
    for entity in uncovered:
        label = f" {entity.label}" if entity.label else ""
        print(f"  - {entity.id}{label}")


@app.command
def impact(item_id: str) -> None:
    """Show what is linked to an entity and whether each link is pinned on its side."""
    entries = get_impact_analysis(item_id, open_ledger().links)

    if not entries:
        print(f"No links found for entity {item_id}")
        return

    print(f"Impact of changing {item_id}:\n")
    for entry in entries:
        arrow = "<-" if entry.direction.value == "incoming" else "->"
        pin = f"pinned @ {entry.current_pinned_version}" if entry.is_pinned else "floating"
        print(f"  {arrow} {entry.affected_node_id} [{entry.link_type.value}] ({pin}) {entry.link_id}")


@app.command
def baseline() -> None:
    """Pin every floating link side to the catalog's current version."""
    config = get_config()
    store = open_ledger(config)
    pinned = store.baseline(open_catalog(config).entities)
    save_ledger(store, config)
    print(f"Pinned {pinned} link side(s)")


@app.command
def stats() -> None:
    """Show link counts by status and pin state."""
    summary = summarize_links(open_ledger().links)
    print(f"Total: {summary.total}")
    print(f"Active: {summary.active}")
    print(f"Needs review: {summary.needs_review}")
    print(f"Floating: {summary.floating}")
    print(f"Pinned: {summary.pinned}")


@app.meta.default
def main(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "critical",
) -> None:
    """Main entry point with global options."""
    configure_logging(log_level)
    app(tokens)


if __name__ == "__main__":
    app.meta()
