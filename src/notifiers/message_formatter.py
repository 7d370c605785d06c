# src/notifiers/message_formatter.py

"""Render snapshots as Telegram Markdown messages."""

from zoneinfo import ZoneInfo

from src.models.snapshot import Snapshot
from src.models.station import ADDRESS_UNAVAILABLE, StationRecord

_DISPLAY_TIME_FORMAT = "%d/%m/%Y %H:%M:%S"


def _format_liters(volume: float) -> str:
    """``12345.0`` -> ``12,345``."""
    return f"{volume:,.0f}"


def volume_marker(
    volume: float, low_mark: float, high_mark: float = 5000.0,
) -> str:
    """Traffic-light marker for a station's stock level."""
    if volume > high_mark:
        return "🟢"
    if volume > low_mark:
        return "🟡"
    return "🔴"


def _format_station(
    record: StationRecord, low_mark: float, high_mark: float,
) -> list[str]:
    lines = [
        f"{volume_marker(record.available_volume, low_mark, high_mark)} "
        f"*{record.display_name}*",
        f"⛽ {_format_liters(record.available_volume)} Lts.",
        f"⏱️ {record.wait_minutes:g} min. wait",
    ]
    if record.address != ADDRESS_UNAVAILABLE:
        lines.append(f"📍 {record.address}")
    return lines


def format_summary(
    snapshot: Snapshot,
    min_volume_threshold: float,
    timezone_name: str = "America/La_Paz",
    high_volume_mark: float = 5000.0,
) -> str:
    """Build the notification text for *snapshot*.

    Stations are listed by available volume, largest first, followed by
    totals and the list of stations below *min_volume_threshold*.
    """
    local_time = snapshot.observed_at.astimezone(ZoneInfo(timezone_name))
    lines: list[str] = [
        f"🚗 *Fuel balances: {snapshot.fuel_category}*",
        f"🕐 {snapshot.source_reported_at}",
        f"📅 {local_time.strftime(_DISPLAY_TIME_FORMAT)}",
        "",
    ]

    for record in snapshot.sorted_by_volume():
        lines.extend(
            _format_station(record, min_volume_threshold, high_volume_mark)
        )
        lines.append("")

    lines.append("📊 *Summary:*")
    lines.append(f"• Total: {_format_liters(snapshot.total_volume)} Lts.")
    lines.append(f"• Stations: {len(snapshot.records)}")

    low = snapshot.low_volume(min_volume_threshold)
    if low:
        names = ", ".join(r.display_name for r in low)
        lines.append(f"⚠️ *Low inventory:* {names}")

    return "\n".join(lines)


def format_error_alert(error: BaseException) -> str:
    """Short operator alert for a failed poll cycle."""
    return f"❌ Scheduled scrape failed: {error}"


def format_startup(
    interval_seconds: float,
    notify_only_on_change: bool,
    min_volume_threshold: float,
) -> str:
    """Announcement sent once when the daemon starts."""
    mode = "changes only" if notify_only_on_change else "every run"
    minutes = interval_seconds / 60
    return "\n".join([
        "🤖 *Fuel monitor started*",
        "",
        f"• Poll interval: {minutes:g} min",
        f"• Notifications: {mode}",
        f"• Minimum volume: {_format_liters(min_volume_threshold)} Lts.",
    ])
