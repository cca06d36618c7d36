"""Tests for CLI commands, called directly against an isolated workspace."""

import json
import typing
from pathlib import Path

import pytest
import yaml
from cyclopts import CycloptsError

from trace_ledger import cli, config_commands, link_commands
from trace_ledger.config import Config
from trace_ledger.models import LinkStatus, LinkType
from trace_ledger.snapshot import load_links


@pytest.fixture
def catalog_file(workspace: Path) -> Path:
    path = workspace / ".trace-ledger" / "catalog.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        yaml.safe_dump(
            {
                "entities": [
                    {"id": "n1", "version": "1.1", "category": "customer"},
                    {"id": "n2", "version": "2.0"},
                    {"id": "n3", "version": "1.0", "label": "Lonely"},
                ],
                "edges": [],
            }
        )
    )
    return path


def _ledger(workspace: Path) -> list:
    return load_links(workspace / ".trace-ledger" / "links.yaml")


def test_link_add_and_list(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test adding a link and listing it back."""
    Config().set("actor", "alice")
    link_commands.add("n1", "n2", type="satisfies", source_version="1.0")

    (link,) = _ledger(workspace)
    assert link.link_type is LinkType.SATISFIES
    assert link.source.version == "1.0"
    assert link.target.version is None
    assert link.metadata.created_by == "alice"

    capsys.readouterr()
    link_commands.list_links("n2", direction="incoming")
    out = capsys.readouterr().out
    assert "Found 1 link(s)" in out
    assert "n1@1.0 --[satisfies]--> n2 (floating)" in out

    link_commands.list_links("n2", direction="outgoing")
    assert "No links found for entity n2" in capsys.readouterr().out


def test_link_remove_reports_unknown(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that removing unknown ids is reported, not raised."""
    link_commands.add("n1", "n2")
    (link,) = _ledger(workspace)
    capsys.readouterr()

    link_commands.remove(link.id, "rl-missing")
    out = capsys.readouterr().out
    assert "Link rl-missing not found" in out
    assert "Removed 1 link(s)" in out
    assert _ledger(workspace) == []


def test_link_status_pin_unpin_verify(
    workspace: Path, catalog_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Test the per-link mutators end to end."""
    link_commands.add("n1", "n2", type="derives")
    (link,) = _ledger(workspace)

    link_commands.status(link.id, "needsReview")
    link_commands.pin(link.id, "source")
    link_commands.pin(link.id, "target", version="1.9")
    link_commands.verify(link.id, verified_by="bob")

    (updated,) = _ledger(workspace)
    assert updated.status.value == "needsReview"
    assert updated.source.version == "1.1"
    assert updated.target.version == "1.9"
    assert updated.metadata.verified_by == "bob"

    link_commands.unpin(link.id, "target")
    (updated,) = _ledger(workspace)
    assert updated.target.version is None

    capsys.readouterr()
    link_commands.show(link.id)
    out = capsys.readouterr().out
    assert "Type: Derives from" in out
    assert "Verified:" in out


def test_link_mutators_report_unknown(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test not-found messages for every per-link command."""
    link_commands.status("rl-x", "active")
    link_commands.pin("rl-x", "source", version="1")
    link_commands.unpin("rl-x", "source")
    link_commands.verify("rl-x")
    link_commands.show("rl-x")
    assert capsys.readouterr().out.count("Link rl-x not found") == 5


def test_pin_without_catalog_entry(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that pinning to the current version needs the entity in the catalog."""
    link_commands.add("ghost", "n2")
    (link,) = _ledger(workspace)
    link_commands.pin(link.id, "source")
    assert "pass --version explicitly" in capsys.readouterr().out
    assert _ledger(workspace)[0].source.version is None


def test_health_command(workspace: Path, catalog_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test human and JSON health output."""
    link_commands.add("n1", "missing", source_version="1.0")
    capsys.readouterr()

    cli.health()
    out = capsys.readouterr().out
    assert "Found 2 issue(s): 1 critical, 1 warning(s)" in out
    assert "[versionDrift]" in out
    assert "[broken]" in out

    cli.health(as_json=True)
    data = json.loads(capsys.readouterr().out)
    assert data["healthy"] is False
    assert data["summary"]["critical"] == 1


def test_health_command_healthy(workspace: Path, catalog_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test output when every link is fine."""
    link_commands.add("n1", "n2")
    capsys.readouterr()
    cli.health()
    assert "All 1 link(s) are healthy" in capsys.readouterr().out


def test_analysis_commands(workspace: Path, catalog_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test orphans, coverage, cycles, impact and stats output."""
    link_commands.add("n1", "n2", type="relates")
    link_commands.add("n2", "n1", type="derives", target_version="1.0")
    link_commands.add("n1", "n2", type="refines")
    capsys.readouterr()

    cli.orphans()
    out = capsys.readouterr().out
    assert "n3 Lonely" in out
    assert "n1" not in out

    cli.coverage()
    assert "n1" in capsys.readouterr().out

    cli.cycles()
    out = capsys.readouterr().out
    assert "Found 1 cycle(s)" in out
    assert "n1 -> n2 -> n1" in out

    cli.impact("n1")
    out = capsys.readouterr().out
    assert "<- n2 [derives] (pinned @ 1.0)" in out
    assert "-> n2 [relates] (floating)" in out

    cli.stats()
    out = capsys.readouterr().out
    assert "Total: 3" in out
    assert "Floating: 3" in out


def test_baseline_command(workspace: Path, catalog_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that baseline pins and persists, and is idempotent."""
    link_commands.add("n1", "n2")
    link_commands.add("n2", "ghost")
    capsys.readouterr()

    cli.baseline()
    assert "Pinned 3 link side(s)" in capsys.readouterr().out
    first, second = _ledger(workspace)
    assert (first.source.version, first.target.version) == ("1.1", "2.0")
    assert (second.source.version, second.target.version) == ("2.0", None)

    cli.baseline()
    assert "Pinned 0 link side(s)" in capsys.readouterr().out


def test_empty_ledger_messages(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test output with no links and no catalog."""
    cli.cycles()
    cli.orphans()
    cli.coverage()
    cli.impact("n1")
    link_commands.list_links()
    out = capsys.readouterr().out
    assert "No cycles found" in out
    assert "No orphan entities found" in out
    assert "All customer requirements are covered" in out
    assert "No links found for entity n1" in out
    assert "No links found" in out


def test_config_commands(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test config set/get/list/unset."""
    config_commands.set("actor", "alice")
    config_commands.get("actor")
    config_commands.list_config()
    out = capsys.readouterr().out
    assert "Set actor = alice (local)" in out
    assert "actor = alice" in out
    assert "Actor: alice" in out

    config_commands.unset("actor")
    config_commands.get("actor")
    assert "actor is not set" in capsys.readouterr().out


def test_link_choices_match_enums() -> None:
    """Test that the CLI offers exactly the known link kinds and statuses."""
    assert set(typing.get_args(link_commands.LinkTypeName)) == {t.value for t in LinkType}
    assert set(typing.get_args(link_commands.LinkStatusName)) == {s.value for s in LinkStatus}


@pytest.mark.parametrize(
    "tokens",
    [
        ["add", "n1", "n2", "--type", "owns"],
        ["status", "rl-1-1", "retired"],
        ["list", "--status", "retired"],
    ],
)
def test_link_commands_reject_unknown_choices(workspace: Path, tokens: list[str]) -> None:
    """Test that bad link kinds and statuses are refused before the ledger is touched."""
    with pytest.raises(CycloptsError):
        link_commands.link_app(tokens, exit_on_error=False, print_error=False)
    assert not (workspace / ".trace-ledger" / "links.yaml").exists()


def test_config_commands_report_bad_keys(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test config set with an unknown key and unset of a missing key."""
    config_commands.set("colour", "blue")
    config_commands.unset("actor")
    out = capsys.readouterr().out
    assert "Unknown config key 'colour'" in out
    assert "actor is not set (local)" in out
    assert Config().list() == {}
