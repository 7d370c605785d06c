# src/models/snapshot.py

"""Snapshot model: one observation of the whole source page."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from src.models.station import StationRecord

SOURCE_TIME_UNAVAILABLE = "unavailable"


def _format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    utc = value.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_timestamp(raw: str) -> datetime:
    """Inverse of :func:`_format_timestamp`; naive input is taken as UTC."""
    parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Snapshot:
    """All station records observed during a single poll cycle.

    Records keep the order in which they were discovered in the page.
    Sorting by volume is a presentation concern, see
    :meth:`sorted_by_volume`.
    """

    observed_at: datetime
    source_reported_at: str = SOURCE_TIME_UNAVAILABLE
    fuel_category: str = ""
    records: tuple[StationRecord, ...] = field(
        default_factory=lambda: tuple[StationRecord, ...]()
    )

    @property
    def total_volume(self) -> float:
        """Sum of available liters across all stations."""
        return sum(r.available_volume for r in self.records)

    def sorted_by_volume(self) -> list[StationRecord]:
        """Return the records ordered by available volume, largest first."""
        return sorted(
            self.records,
            key=lambda r: r.available_volume,
            reverse=True,
        )

    def low_volume(self, threshold: float) -> list[StationRecord]:
        """Stations whose volume is below *threshold* liters."""
        return [
            r for r in self.records if r.available_volume < threshold
        ]

    def find(self, location_id: int) -> StationRecord | None:
        """Look up a record by its primary identifier."""
        for record in self.records:
            if record.location_id == location_id:
                return record
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the persisted JSON shape."""
        return {
            "timestamp": _format_timestamp(self.observed_at),
            "ultima_medicion": self.source_reported_at,
            "tipo_combustible": self.fuel_category,
            "estaciones": [r.to_dict() for r in self.records],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Snapshot":
        """Rebuild a snapshot from its persisted dict form."""
        stations: list[dict[str, Any]] = data.get("estaciones", [])
        return cls(
            observed_at=_parse_timestamp(str(data["timestamp"])),
            source_reported_at=str(
                data.get("ultima_medicion", SOURCE_TIME_UNAVAILABLE)
            ),
            fuel_category=str(data.get("tipo_combustible", "")),
            records=tuple(StationRecord.from_dict(s) for s in stations),
        )
