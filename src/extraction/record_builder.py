# src/extraction/record_builder.py

"""Assemble a StationRecord from a fragment and its enrichment."""

import math
from dataclasses import dataclass

from src.extraction.context_enricher import Enrichment, MalformedRecordError
from src.extraction.fragment_locator import Fragment
from src.models.station import StationRecord


@dataclass(frozen=True)
class RecordConstants:
    """Fixed per-feed values stamped onto every record."""

    fuel_kind: str = "G"
    service_duration_minutes: float = 12.0
    average_load_liters: float = 40.0


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (not banker's rounding)."""
    return math.floor(value + 0.5)


def service_positions(
    service_duration_minutes: float, wait_minutes: float,
) -> int:
    """Number of pumps implied by the wait time, never below one."""
    if wait_minutes <= 0:
        return 1
    return max(1, round_half_up(service_duration_minutes / wait_minutes))


def build_record(
    fragment: Fragment,
    enrichment: Enrichment,
    constants: RecordConstants = RecordConstants(),
) -> StationRecord:
    """Combine raw fields, enrichment and constants into a record.

    Raises:
        MalformedRecordError: If volume or wait time is not finite.
    """
    for label, value in (
        ("volume", enrichment.available_volume),
        ("wait", enrichment.wait_minutes),
    ):
        if not math.isfinite(value):
            raise MalformedRecordError(
                f"Station {fragment.location_id}: {label} is {value}"
            )

    return StationRecord(
        location_id=fragment.location_id,
        secondary_id=fragment.secondary_id,
        product_id=fragment.product_id,
        measured_at=fragment.measured_at,
        raw_balance=fragment.raw_balance,
        display_name=enrichment.display_name,
        available_volume=enrichment.available_volume,
        wait_minutes=enrichment.wait_minutes,
        address=enrichment.address,
        fuel_kind=constants.fuel_kind,
        service_duration_minutes=constants.service_duration_minutes,
        service_positions=service_positions(
            constants.service_duration_minutes, enrichment.wait_minutes
        ),
        average_load_liters=constants.average_load_liters,
        per_position_minutes=enrichment.wait_minutes,
    )
