"""Mini README: Command line entry point for GiroPositivo.

This script exposes a Typer CLI that loads a JSON snapshot of one driver's
contracts, entries and journeys and prints daily summaries, period reports,
journey reconciliations and legacy migrations. Commands that change data
write the snapshot back only when ``--write`` is passed.
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer

from giropositivo.configuration import get_settings
from giropositivo.errors import GiroPositivoError
from giropositivo.ledger import Platform
from giropositivo.logging_utils import configure_root_logger
from giropositivo.services import TrackerService
from giropositivo.stats import ReportRange
from giropositivo.storage import dump_snapshot, load_snapshot
from giropositivo.utils import format_duration, format_money

cli = typer.Typer(help="Inspect and reconcile GiroPositivo driver snapshots.")


def _service(snapshot: Path, owner: str) -> TrackerService:
    configure_root_logger(get_settings().log_level)
    return TrackerService(load_snapshot(snapshot), owner)


def _echo(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def _fail(error: Exception) -> NoReturn:
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(code=1)


@cli.command()
def daily(
    snapshot: Path = typer.Argument(..., exists=True, help="Snapshot JSON file."),
    owner: str = typer.Option(..., help="Owner whose records are summarised."),
    day: Optional[str] = typer.Option(None, help="Civil date (YYYY-MM-DD); defaults to today."),
) -> None:
    """Print the daily summary for the active contract."""

    try:
        service = _service(snapshot, owner)
        dashboard = service.dashboard(date.fromisoformat(day) if day else None)
    except (GiroPositivoError, ValueError) as error:
        _fail(error)
    stats = dashboard["stats"]
    typer.echo(
        f"Net profit {format_money(stats['net_profit'])} / goal {format_money(stats['profit_goal'])}"
        f" ({stats['goal_status']}), driven {stats['journey_distance']:.1f} km in"
        f" {format_duration(stats['journey_time_minutes'])}"
    )
    dashboard["activities"] = [
        {"label": activity.label, "total": activity.total, "count": activity.count}
        for activity in dashboard["activities"]
    ]
    _echo(dashboard)


@cli.command()
def report(
    snapshot: Path = typer.Argument(..., exists=True, help="Snapshot JSON file."),
    owner: str = typer.Option(..., help="Owner whose records are reported."),
    days: Optional[int] = typer.Option(None, min=1, help="Report the last N days."),
    start: Optional[str] = typer.Option(None, help="Custom range start (YYYY-MM-DD)."),
    end: Optional[str] = typer.Option(None, help="Custom range end (YYYY-MM-DD)."),
    contract: bool = typer.Option(False, "--contract", help="Report the whole contract window."),
    platform: Optional[str] = typer.Option(None, help="Restrict revenue and app fees to a platform."),
) -> None:
    """Print period KPIs for a range."""

    try:
        service = _service(snapshot, owner)
        selected_platform = Platform.from_str(platform) if platform else None
        if contract:
            report_contract = service.report_contract()
            if report_contract is None:
                raise GiroPositivoError("No contract registered for this owner")
            report_range = ReportRange.for_contract(report_contract)
        elif start or end:
            if not (start and end):
                raise GiroPositivoError("Custom ranges need both --start and --end")
            report_range = ReportRange.custom(date.fromisoformat(start), date.fromisoformat(end))
        else:
            report_range = ReportRange.last_days(days or get_settings().default_report_days)
        result = service.period_report(report_range, platform=selected_platform)
    except (GiroPositivoError, ValueError) as error:
        _fail(error)
    _echo(result.as_dict())


@cli.command()
def reconcile(
    snapshot: Path = typer.Argument(..., exists=True, help="Snapshot JSON file."),
    owner: str = typer.Option(..., help="Owner of the journey."),
    journey: str = typer.Option(..., help="Closed journey to reconcile."),
    write: bool = typer.Option(False, help="Persist the result back into the snapshot."),
) -> None:
    """Recompute the automatic wallet entry of a closed journey."""

    try:
        service = _service(snapshot, owner)
        result = service.update_journey(journey)
    except (GiroPositivoError, ValueError) as error:
        _fail(error)
    _echo(
        {
            "journey_id": result.journey_id,
            "recharges": result.recharges,
            "tax": result.tax,
            "automatic_entry": result.automatic_entry.as_dict() if result.automatic_entry else None,
            "removed_entry_ids": list(result.removed_entry_ids),
        }
    )
    if write:
        dump_snapshot(service.repository, snapshot)


@cli.command()
def migrate(
    snapshot: Path = typer.Argument(..., exists=True, help="Snapshot JSON file."),
    owner: str = typer.Option(..., help="Owner whose legacy records are migrated."),
    write: bool = typer.Option(False, help="Persist the migrated records."),
) -> None:
    """Backfill contract ids and link legacy recharges to their journeys."""

    try:
        service = _service(snapshot, owner)
        migration = service.migrate_legacy_records()
    except (GiroPositivoError, ValueError) as error:
        _fail(error)
    _echo({"updated": migration.updated_ids, "ambiguous": migration.ambiguous_ids})
    if write and migration.changed:
        dump_snapshot(service.repository, snapshot)


if __name__ == "__main__":
    cli()
