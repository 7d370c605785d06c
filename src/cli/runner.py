# src/cli/runner.py

"""Command runners behind ``main.py``: daemon, one-shot, offline, health."""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console
from rich.table import Table

from src.config.settings import ConfigurationError, Settings
from src.extraction.snapshot_parser import SnapshotParser
from src.models.snapshot import Snapshot
from src.notifiers.telegram_notifier import TelegramNotifier
from src.scrapers.fuel_page_scraper import FuelPageScraper
from src.services.poll_cycle import PollCycle, PollState
from src.services.scheduler import PollScheduler
from src.services.snapshot_differ import NotifyPolicy
from src.storage.snapshot_store import SnapshotStore

logger = logging.getLogger("fuel_monitor.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def _print_table(snapshot: Snapshot) -> None:
    """Render a Rich table of stations to stdout, largest stock first."""
    table = Table(
        title=(
            f"{snapshot.fuel_category} "
            f"(measured {snapshot.source_reported_at})"
        ),
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Station", style="bold")
    table.add_column("Volume (L)", justify="right", style="green")
    table.add_column("Wait", justify="right")
    table.add_column("Pumps", justify="center")
    table.add_column("Address", overflow="fold", style="dim")

    for idx, r in enumerate(snapshot.sorted_by_volume(), 1):
        table.add_row(
            str(idx),
            f"{r.display_name} [dim]({r.location_id})[/dim]",
            f"{r.available_volume:,.0f}",
            f"{r.wait_minutes:g} min",
            str(r.service_positions),
            r.address,
        )

    Console().print(table)
    _err.print(
        f"[green]✓ {len(snapshot.records)} stations, "
        f"{snapshot.total_volume:,.0f} L total[/green]"
    )


def _emit(snapshot: Snapshot, output_format: str) -> None:
    if output_format == "json":
        json.dump(
            snapshot.to_dict(), sys.stdout, ensure_ascii=False, indent=2
        )
        sys.stdout.write("\n")
    else:
        _print_table(snapshot)


def build_cycle(notify: bool) -> PollCycle:
    """Wire the production collaborators into a :class:`PollCycle`."""
    return PollCycle(
        scraper=FuelPageScraper(),
        parser=SnapshotParser.from_settings(),
        policy=NotifyPolicy.from_settings(),
        notifier=TelegramNotifier() if notify else None,
        store=SnapshotStore(),
    )


async def run_daemon() -> int:
    """Run the scheduler until interrupted."""
    try:
        Settings.require_notifier()
    except ConfigurationError as exc:
        logger.critical("Cannot start: %s", exc)
        _err.print(f"[red]{exc}[/red]")
        return 1

    scheduler = PollScheduler(
        build_cycle(notify=True),
        interval=Settings.POLL_INTERVAL,
        run_on_start=Settings.RUN_ON_START,
        alert_on_errors=Settings.ALERT_ON_ERRORS,
    )
    await scheduler.announce()
    _err.print(
        f"[bold]Monitoring[/bold] {Settings.SOURCE_URL} "
        f"[dim]every {Settings.POLL_INTERVAL:.0f}s[/dim]"
    )
    state = await scheduler.start()
    _err.print(
        f"[dim]Stopped after {state.runs} runs "
        f"({state.failures} failed)[/dim]"
    )
    return 0


async def run_once(notify: bool, output_format: str) -> int:
    """Run a single cycle, print the snapshot, exit 0 on success."""
    if notify:
        try:
            Settings.require_notifier()
        except ConfigurationError as exc:
            _err.print(f"[red]{exc}[/red]")
            return 1

    cycle = build_cycle(notify=notify)
    try:
        _, outcome = await cycle.run(PollState())
    except Exception as exc:
        logger.error("Single run failed: %s", exc, exc_info=True)
        _err.print(f"[red]Error: {exc}[/red]")
        return 1

    if outcome.saved_path is not None:
        _err.print(f"[dim]Saved → {outcome.saved_path}[/dim]")
    if notify and not outcome.notified:
        _err.print("[yellow]Notification was not delivered.[/yellow]")
    _emit(outcome.snapshot, output_format)
    return 0 if outcome.snapshot.records else 1


def run_file(path: str, output_format: str) -> int:
    """Parse a saved HTML page offline (no fetch, no save, no notify)."""
    filepath = Path(path)
    try:
        html = filepath.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        _err.print(f"[red]Cannot read {filepath}: {exc}[/red]")
        return 1

    parser = SnapshotParser.from_settings()
    snapshot, stats = parser.parse_with_stats(
        html, datetime.now(timezone.utc)
    )
    _err.print(
        f"[dim]{stats.fragments} fragments, {stats.malformed} malformed, "
        f"{stats.duplicates} duplicates[/dim]"
    )
    if not snapshot.records:
        _err.print("[yellow]No stations found.[/yellow]")
        return 1
    _emit(snapshot, output_format)
    return 0


async def run_health_check() -> int:
    """Probe the source page and Telegram, print a table."""
    from src.services.health_checker import HealthChecker

    _err.print("[bold]Running health check...[/bold]")
    checker = HealthChecker()
    results = await checker.check_all()

    table = Table(
        title="Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Dependency", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    any_down = False
    for r in results:
        if r.status == "ok":
            status = "[green]✅ OK[/green]"
        elif r.status == "slow":
            status = "[yellow]⚠️  SLOW[/yellow]"
        else:
            status = "[red]❌ DOWN[/red]"
            any_down = True

        latency = f"{r.latency_ms:.0f}ms" if r.latency_ms > 0 else "—"
        table.add_row(r.source_id, status, latency, r.message)

    Console().print(table)
    return 1 if any_down else 0
