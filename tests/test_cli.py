"""Mini README: Tests for the snapshot command line."""

from __future__ import annotations

from typer.testing import CliRunner

from giropositivo.journeys import automatic_entry_id
from giropositivo.storage import load_snapshot
from giropositivo_cli import cli

runner = CliRunner()


def test_report_for_a_custom_range(snapshot_file) -> None:
    result = runner.invoke(
        cli,
        ["report", str(snapshot_file), "--owner", "driver", "--start", "2024-03-02", "--end", "2024-03-02"],
    )

    assert result.exit_code == 0, result.output
    assert '"revenue": 100.0' in result.stdout
    assert '"journey_count": 1' in result.stdout


def test_report_rejects_half_open_ranges(snapshot_file) -> None:
    result = runner.invoke(cli, ["report", str(snapshot_file), "--owner", "driver", "--start", "2024-03-02"])
    assert result.exit_code == 1


def test_reconcile_writes_the_automatic_entry(snapshot_file) -> None:
    result = runner.invoke(
        cli,
        ["reconcile", str(snapshot_file), "--owner", "driver", "--journey", "journey_0001", "--write"],
    )

    assert result.exit_code == 0, result.output
    assert '"tax": 20.0' in result.stdout
    repository = load_snapshot(snapshot_file)
    assert repository.get_entry(automatic_entry_id("journey_0001")).amount == 20.0


def test_reconcile_unknown_journey_fails(snapshot_file) -> None:
    result = runner.invoke(
        cli, ["reconcile", str(snapshot_file), "--owner", "driver", "--journey", "journey_9999"]
    )
    assert result.exit_code == 1


def test_migrate_without_write_leaves_the_file_alone(snapshot_file) -> None:
    before = snapshot_file.read_text(encoding="utf-8")
    result = runner.invoke(cli, ["migrate", str(snapshot_file), "--owner", "driver"])

    assert result.exit_code == 0, result.output
    assert snapshot_file.read_text(encoding="utf-8") == before
