# tests/test_record_builder.py

"""Tests for station record assembly and derived pump counts."""

import math
import unittest

from src.extraction.context_enricher import Enrichment, MalformedRecordError
from src.extraction.fragment_locator import Fragment
from src.extraction.record_builder import (
    RecordConstants,
    build_record,
    round_half_up,
    service_positions,
)


def _fragment() -> Fragment:
    return Fragment(
        location_id=5850275,
        secondary_id=134,
        product_id=1,
        measured_at="2025-01-31 10:15:00",
        raw_balance="1499.9",
        offset=0,
        context="",
    )


def _enrichment(volume: float = 1500.0, wait: float = 3.0) -> Enrichment:
    return Enrichment(
        display_name="BENI",
        address="AV. BENI, 2DO ANILLO",
        wait_minutes=wait,
        available_volume=volume,
        wait_source="time_label",
        volume_source="rendered",
    )


class TestServicePositions(unittest.TestCase):
    """Pumps = round(12 / wait), floored at one."""

    def test_grid(self) -> None:
        cases = [
            (1, 12),
            (2, 6),
            (3, 4),
            (4, 3),
            (5, 2),    # 2.4
            (8, 2),    # 1.5 rounds up
            (12, 1),
            (24, 1),   # 0.5 rounds up to 1
            (60, 1),   # 0.2, floored at one
        ]
        for wait, expected in cases:
            with self.subTest(wait=wait):
                self.assertEqual(service_positions(12, wait), expected)

    def test_non_positive_wait(self) -> None:
        self.assertEqual(service_positions(12, 0), 1)
        self.assertEqual(service_positions(12, -3), 1)

    def test_round_half_up(self) -> None:
        """Halves round up, unlike the built-in round()."""
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(0.5), 1)
        self.assertEqual(round_half_up(2.49), 2)


class TestBuildRecord(unittest.TestCase):
    """Combining fragment, enrichment and constants."""

    def test_fields(self) -> None:
        record = build_record(_fragment(), _enrichment())

        self.assertEqual(record.location_id, 5850275)
        self.assertEqual(record.secondary_id, 134)
        self.assertEqual(record.raw_balance, "1499.9")
        self.assertEqual(record.display_name, "BENI")
        self.assertEqual(record.available_volume, 1500.0)
        self.assertEqual(record.fuel_kind, "G")
        self.assertEqual(record.service_duration_minutes, 12.0)
        self.assertEqual(record.average_load_liters, 40.0)
        self.assertEqual(record.service_positions, 4)
        self.assertEqual(record.per_position_minutes, 3.0)

    def test_custom_constants(self) -> None:
        constants = RecordConstants(
            fuel_kind="D", service_duration_minutes=20.0,
            average_load_liters=60.0,
        )
        record = build_record(_fragment(), _enrichment(wait=5), constants)
        self.assertEqual(record.fuel_kind, "D")
        self.assertEqual(record.service_positions, 4)
        self.assertEqual(record.average_load_liters, 60.0)

    def test_non_finite_volume_rejected(self) -> None:
        with self.assertRaises(MalformedRecordError):
            build_record(_fragment(), _enrichment(volume=math.nan))

    def test_non_finite_wait_rejected(self) -> None:
        with self.assertRaises(MalformedRecordError):
            build_record(_fragment(), _enrichment(wait=math.inf))

    def test_zero_volume_is_valid(self) -> None:
        record = build_record(_fragment(), _enrichment(volume=0.0))
        self.assertEqual(record.available_volume, 0.0)


if __name__ == "__main__":
    unittest.main()
