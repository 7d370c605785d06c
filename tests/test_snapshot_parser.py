# tests/test_snapshot_parser.py

"""Tests for turning a whole page into a Snapshot."""

import unittest
from datetime import datetime, timezone

from src.extraction.catalog import CatalogEntry, StationCatalog
from src.extraction.snapshot_parser import (
    SnapshotParser,
    extract_measurement_label,
)

OBSERVED = datetime(2025, 1, 31, 14, 0, tzinfo=timezone.utc)

# Wider than two context windows so neighbouring sections never leak
_GAP = "<div>" + " " * 6500 + "</div>"


def _dump(station_id: int, saldo: str, un: int = 134) -> str:
    fecha = "2025-01-31 10:15:00"
    return (
        "<pre>array(5) {\n"
        f'  ["id"]=>\n  int({station_id})\n'
        f'  ["un"]=>\n  int({un})\n'
        '  ["producto_id"]=>\n  int(1)\n'
        f'  ["fecha"]=>\n  string({len(fecha)}) "{fecha}"\n'
        f'  ["saldo"]=>\n  string({len(saldo)}) "{saldo}"\n'
        "}\n</pre>"
    )


def _page(*sections: str, header: str = "") -> str:
    return (
        "<html><body>"
        + header
        + _GAP
        + _GAP.join(sections)
        + _GAP
        + "</body></html>"
    )


def _parser() -> SnapshotParser:
    catalog = StationCatalog([
        CatalogEntry(5850275, "BENI", "AV. BENI, 2DO ANILLO"),
        CatalogEntry(5850311, "GASCO", "AV. BANZER 3ER ANILLO"),
    ])
    return SnapshotParser(catalog, fuel_category="GASOLINA ESPECIAL")


class TestMeasurementLabel(unittest.TestCase):
    """The page's own "last measured" line."""

    def test_label_found(self) -> None:
        html = "<p><b>Última medición:</b> 31/01/2025 10:15</p>"
        self.assertEqual(
            extract_measurement_label(html), "31/01/2025 10:15"
        )

    def test_unaccented_label(self) -> None:
        html = "<span>Ultima medicion 31/01/2025</span>"
        self.assertEqual(extract_measurement_label(html), "31/01/2025")

    def test_label_missing(self) -> None:
        self.assertEqual(
            extract_measurement_label("<p>hola</p>"), "unavailable"
        )


class TestSnapshotParser(unittest.TestCase):
    """Fragments through enrichment into one snapshot."""

    def test_two_stations(self) -> None:
        html = _page(
            "<h3>Beni</h3>" + _dump(5850275, "1499.90")
            + "<b>1,500 Lts.</b> Tiempo: 6 min",
            "<h3>Gasco</h3>" + _dump(5850311, "820.00"),
            header="<p>Última medición: 31/01/2025 10:15</p>",
        )
        snapshot = _parser().parse(html, OBSERVED)

        self.assertEqual(snapshot.observed_at, OBSERVED)
        self.assertEqual(snapshot.source_reported_at, "31/01/2025 10:15")
        self.assertEqual(snapshot.fuel_category, "GASOLINA ESPECIAL")
        self.assertEqual(
            [r.location_id for r in snapshot.records], [5850275, 5850311]
        )

        beni, gasco = snapshot.records
        self.assertEqual(beni.available_volume, 1500.0)
        self.assertEqual(beni.wait_minutes, 6.0)
        self.assertEqual(beni.service_positions, 2)
        self.assertEqual(gasco.available_volume, 820.0)
        self.assertEqual(gasco.wait_minutes, 2.0)
        self.assertEqual(gasco.service_positions, 6)
        self.assertEqual(gasco.address, "AV. BANZER 3ER ANILLO")

    def test_malformed_station_is_excluded(self) -> None:
        html = _page(
            _dump(5850275, "sin dato"),
            _dump(5850311, "820.00"),
        )
        snapshot, stats = _parser().parse_with_stats(html, OBSERVED)

        self.assertEqual(
            [r.location_id for r in snapshot.records], [5850311]
        )
        self.assertEqual(stats.fragments, 2)
        self.assertEqual(stats.malformed, 1)

    def test_duplicate_ids_keep_first(self) -> None:
        html = _page(
            _dump(5850275, "100"),
            _dump(5850275, "999"),
        )
        snapshot, stats = _parser().parse_with_stats(html, OBSERVED)

        self.assertEqual(len(snapshot.records), 1)
        self.assertEqual(snapshot.records[0].available_volume, 100.0)
        self.assertEqual(stats.duplicates, 1)

    def test_malformed_first_then_valid_duplicate(self) -> None:
        """A rejected fragment does not claim its id."""
        html = _page(
            _dump(5850275, "???"),
            _dump(5850275, "250"),
        )
        snapshot = _parser().parse(html, OBSERVED)
        self.assertEqual(snapshot.records[0].available_volume, 250.0)

    def test_page_without_fragments(self) -> None:
        html = "<html><body><h1>En mantenimiento</h1></body></html>"
        snapshot, stats = _parser().parse_with_stats(html, OBSERVED)

        self.assertEqual(snapshot.records, ())
        self.assertEqual(stats.fragments, 0)
        self.assertEqual(snapshot.source_reported_at, "unavailable")

    def test_uncatalogued_station_names(self) -> None:
        html = _page(
            "<h3>Gasco</h3>" + _dump(1, "10"),
            _dump(2, "20"),
        )
        snapshot = _parser().parse(html, OBSERVED)

        self.assertEqual(snapshot.records[0].display_name, "GASCO")
        self.assertEqual(snapshot.records[1].display_name, "Location 2")

    def test_parsing_is_deterministic(self) -> None:
        html = _page(_dump(5850275, "100"), _dump(5850311, "200"))
        parser = _parser()
        self.assertEqual(
            parser.parse(html, OBSERVED), parser.parse(html, OBSERVED)
        )


if __name__ == "__main__":
    unittest.main()
