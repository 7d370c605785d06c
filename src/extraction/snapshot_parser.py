# src/extraction/snapshot_parser.py

"""Turn one fetched page into an immutable Snapshot."""

import logging
import re
from dataclasses import dataclass
from datetime import datetime

from bs4 import BeautifulSoup

from src.config.settings import Settings
from src.extraction.catalog import StationCatalog
from src.extraction.context_enricher import (
    ContextEnricher,
    MalformedRecordError,
)
from src.extraction.fragment_locator import locate_fragments
from src.extraction.record_builder import RecordConstants, build_record
from src.models.snapshot import SOURCE_TIME_UNAVAILABLE, Snapshot
from src.models.station import StationRecord

logger = logging.getLogger("fuel_monitor.extraction")

_MEASUREMENT_RE = re.compile(
    r"[ÚU]ltima\s+medici[óo]n\s*:?\s+([^\n]+)", re.IGNORECASE
)


@dataclass
class ParseStats:
    """Counters for one parse, reported alongside the snapshot."""

    fragments: int = 0
    malformed: int = 0
    duplicates: int = 0


def extract_measurement_label(html: str) -> str:
    """Return the page's own "last measured" label, if printed."""
    text = BeautifulSoup(html, "lxml").get_text("\n")
    match = _MEASUREMENT_RE.search(text)
    if match:
        label = match.group(1).strip()
        if label:
            return label
    return SOURCE_TIME_UNAVAILABLE


class SnapshotParser:
    """Locate fragments, enrich them, and collect the resulting records."""

    def __init__(
        self,
        catalog: StationCatalog,
        enricher: ContextEnricher | None = None,
        constants: RecordConstants | None = None,
        fuel_category: str = Settings.FUEL_CATEGORY,
        window: int = Settings.CONTEXT_WINDOW,
    ) -> None:
        self.catalog = catalog
        self.enricher = enricher or ContextEnricher(
            catalog, default_wait=Settings.DEFAULT_WAIT_MINUTES
        )
        self.constants = constants or RecordConstants(
            fuel_kind=Settings.FUEL_KIND,
            service_duration_minutes=Settings.SERVICE_DURATION_MINUTES,
            average_load_liters=Settings.AVERAGE_LOAD_LITERS,
        )
        self.fuel_category = fuel_category
        self.window = window

    @classmethod
    def from_settings(cls) -> "SnapshotParser":
        """Build a parser around the configured station catalog."""
        return cls(StationCatalog.from_json(Settings.STATIONS_PATH))

    def parse_with_stats(
        self, html: str, observed_at: datetime,
    ) -> tuple[Snapshot, ParseStats]:
        """Parse *html* and also return fragment/malformed/duplicate counts."""
        stats = ParseStats()
        records: list[StationRecord] = []
        seen: set[int] = set()

        for fragment in locate_fragments(html, self.window):
            stats.fragments += 1
            if fragment.location_id in seen:
                stats.duplicates += 1
                logger.debug(
                    "Duplicate fragment for station %d at offset %d",
                    fragment.location_id,
                    fragment.offset,
                )
                continue
            try:
                enrichment = self.enricher.enrich(
                    fragment.location_id,
                    fragment.secondary_id,
                    fragment.context,
                    fragment.raw_balance,
                )
                record = build_record(fragment, enrichment, self.constants)
            except MalformedRecordError as exc:
                stats.malformed += 1
                logger.warning(
                    "Skipping malformed station %d: %s",
                    fragment.location_id,
                    exc,
                )
                continue

            seen.add(record.location_id)
            records.append(record)
            logger.debug(
                "Station %d -> %s: %.0f L, wait %.1f min (%s/%s)",
                record.location_id,
                record.display_name,
                record.available_volume,
                record.wait_minutes,
                enrichment.wait_source,
                enrichment.volume_source,
            )

        if stats.fragments == 0:
            logger.warning("No station fragments found in page")
        else:
            logger.info(
                "Parsed %d stations from %d fragments "
                "(%d malformed, %d duplicates)",
                len(records),
                stats.fragments,
                stats.malformed,
                stats.duplicates,
            )

        snapshot = Snapshot(
            observed_at=observed_at,
            source_reported_at=extract_measurement_label(html),
            fuel_category=self.fuel_category,
            records=tuple(records),
        )
        return snapshot, stats

    def parse(self, html: str, observed_at: datetime) -> Snapshot:
        """Parse *html* into a Snapshot stamped with *observed_at*."""
        snapshot, _ = self.parse_with_stats(html, observed_at)
        return snapshot
