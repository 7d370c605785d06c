# src/extraction/catalog.py

"""Reference catalog mapping station identifiers to names and addresses."""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger("fuel_monitor.catalog")


@dataclass(frozen=True)
class CatalogEntry:
    """A known station: display name, address and optional wait override."""

    location_id: int
    name: str
    address: str
    secondary_id: int | None = None
    wait_minutes: float | None = None


class StationCatalog:
    """Lookup table of known stations, keyed by primary and secondary id."""

    def __init__(self, entries: list[CatalogEntry]) -> None:
        self._by_id: dict[int, CatalogEntry] = {}
        self._by_secondary: dict[int, CatalogEntry] = {}
        for entry in entries:
            self._by_id[entry.location_id] = entry
            if entry.secondary_id is not None:
                self._by_secondary[entry.secondary_id] = entry

        # Canonical upper-case names; a name can be shared by several ids
        self.known_names: tuple[str, ...] = tuple(
            sorted({e.name.upper() for e in entries})
        )
        # Longest first so "SUR CENTRAL" wins over a shorter prefix
        alternation = "|".join(
            re.escape(n)
            for n in sorted(self.known_names, key=len, reverse=True)
        )
        self._name_re: re.Pattern[str] | None = (
            re.compile(f"({alternation})", re.IGNORECASE)
            if alternation
            else None
        )

    def __len__(self) -> int:
        return len(self._by_id)

    def lookup(
        self, location_id: int, secondary_id: int | None = None,
    ) -> CatalogEntry | None:
        """Resolve by primary id, then by secondary id."""
        entry = self._by_id.get(location_id)
        if entry is None and secondary_id is not None:
            entry = self._by_secondary.get(secondary_id)
        return entry

    def find_name_in(self, text: str) -> str | None:
        """Return the known name occurring first in *text*, if any."""
        if self._name_re is None:
            return None
        match = self._name_re.search(text)
        return match.group(1).upper() if match else None

    @classmethod
    def from_json(cls, path: Path) -> "StationCatalog":
        """Load the catalog from a ``{"stations": [...]}`` JSON file."""
        with open(path, encoding="utf-8") as f:
            raw: dict[str, Any] = json.load(f)

        entries: list[CatalogEntry] = []
        for item in raw.get("stations", []):
            wait = item.get("wait_minutes")
            secondary = item.get("un")
            entries.append(
                CatalogEntry(
                    location_id=int(item["id"]),
                    name=str(item["name"]),
                    address=str(item["address"]),
                    secondary_id=(
                        int(secondary) if secondary is not None else None
                    ),
                    wait_minutes=float(wait) if wait is not None else None,
                )
            )

        logger.debug("Loaded %d catalog entries from %s", len(entries), path)
        return cls(entries)
