# src/services/snapshot_differ.py

"""Decide whether a new snapshot is worth a notification."""

import logging
from dataclasses import dataclass

from src.config.settings import Settings
from src.models.snapshot import Snapshot

logger = logging.getLogger("fuel_monitor.differ")


@dataclass(frozen=True)
class NotifyPolicy:
    """Thresholds consulted by the differ."""

    notify_only_on_change: bool = False
    min_volume_threshold: float = 1000.0
    significant_change_percent: float = 20.0
    notify_on_empty: bool = False

    @classmethod
    def from_settings(cls) -> "NotifyPolicy":
        """Build the policy from the environment-backed settings."""
        return cls(
            notify_only_on_change=Settings.NOTIFY_ONLY_CHANGES,
            min_volume_threshold=Settings.MIN_VOLUME_THRESHOLD,
            significant_change_percent=Settings.SIGNIFICANT_CHANGE_PERCENT,
            notify_on_empty=Settings.NOTIFY_ON_EMPTY,
        )


def find_notable_change(
    current: Snapshot,
    previous: Snapshot | None,
    policy: NotifyPolicy,
) -> str | None:
    """Return why *current* is notable, or ``None`` when it is not.

    Stops at the first station that triggers a rule.
    """
    if not current.records:
        # A transient empty page would otherwise look like every
        # station disappearing at once.
        return "empty snapshot" if policy.notify_on_empty else None

    if previous is None:
        return "no previous snapshot"
    if not policy.notify_only_on_change:
        return "unconditional notification"

    last_by_id = {r.location_id: r for r in previous.records}
    for record in current.records:
        last = last_by_id.get(record.location_id)
        if last is None:
            return f"new station {record.location_id}"

        delta = abs(record.available_volume - last.available_volume)
        if last.available_volume == 0:
            if delta > 0:
                return (
                    f"station {record.location_id} changed from zero"
                )
        else:
            percent = delta * 100 / last.available_volume
            if percent > policy.significant_change_percent:
                return (
                    f"station {record.location_id} changed "
                    f"{percent:.1f}%"
                )

        if record.available_volume < policy.min_volume_threshold:
            return (
                f"station {record.location_id} below "
                f"{policy.min_volume_threshold:.0f} L"
            )

    return None


def should_notify(
    current: Snapshot,
    previous: Snapshot | None,
    policy: NotifyPolicy,
) -> bool:
    """True when *current* differs notably from *previous*."""
    reason = find_notable_change(current, previous, policy)
    if reason is not None:
        logger.debug("Snapshot is notable: %s", reason)
    return reason is not None
