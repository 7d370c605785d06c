# src/extraction/context_enricher.py

"""Resolve display name, address, wait time and volume for a fragment."""

import logging
import math
import re
from dataclasses import dataclass

from src.extraction.catalog import StationCatalog
from src.models.station import ADDRESS_UNAVAILABLE

logger = logging.getLogger("fuel_monitor.extraction")

_NUMBER = r"(\d+(?:[.,]\d+)?)"


@dataclass(frozen=True)
class WaitPattern:
    """A named textual pattern whose first group is the wait in minutes."""

    name: str
    regex: re.Pattern[str]


# Evaluated in order; the first pattern that matches wins.
WAIT_TIME_PATTERNS: tuple[WaitPattern, ...] = (
    WaitPattern(
        "minutes_approx",
        re.compile(_NUMBER + r"\s*minutos?\s*aprox\.?", re.IGNORECASE),
    ),
    WaitPattern(
        "time_label",
        re.compile(r"tiempo[:\s]*" + _NUMBER + r"\s*min", re.IGNORECASE),
    ),
    WaitPattern(
        "wait_label",
        re.compile(r"espera[:\s]*" + _NUMBER + r"\s*min", re.IGNORECASE),
    ),
    WaitPattern(
        "min_wait",
        re.compile(_NUMBER + r"\s*min\s*espera", re.IGNORECASE),
    ),
    WaitPattern(
        "minutes_label",
        re.compile(r"minutos?\s*:\s*" + _NUMBER, re.IGNORECASE),
    ),
)

# "12,345 Lts." as rendered for humans next to the raw array
_LITERS_RE = re.compile(
    r"(?<![\d,.])(\d{1,3}(?:,\d{3})+|\d+)\s*Lts?\b\.?",
    re.IGNORECASE,
)


class MalformedRecordError(ValueError):
    """A station field could not be parsed into a finite number."""


def parse_number(raw: str) -> float:
    """Parse a decimal quantity, rejecting NaN and infinities."""
    try:
        value = float(raw.strip())
    except ValueError as exc:
        raise MalformedRecordError(f"Not a number: {raw!r}") from exc
    if not math.isfinite(value):
        raise MalformedRecordError(f"Not a finite number: {raw!r}")
    return value


@dataclass(frozen=True)
class Enrichment:
    """Everything the context adds on top of the raw fragment fields."""

    display_name: str
    address: str
    wait_minutes: float
    available_volume: float
    wait_source: str
    volume_source: str


class ContextEnricher:
    """Combine catalog data and context heuristics for one fragment."""

    def __init__(
        self,
        catalog: StationCatalog,
        wait_patterns: tuple[WaitPattern, ...] = WAIT_TIME_PATTERNS,
        default_wait: float = 2.0,
    ) -> None:
        self.catalog = catalog
        self.wait_patterns = wait_patterns
        self.default_wait = default_wait

    def resolve_identity(
        self, location_id: int, secondary_id: int, context: str,
    ) -> tuple[str, str, float | None]:
        """Return ``(name, address, wait_override)`` for a station."""
        entry = self.catalog.lookup(location_id, secondary_id)
        if entry is not None:
            return entry.name, entry.address, entry.wait_minutes

        name = self.catalog.find_name_in(context)
        if name is not None:
            logger.debug(
                "Station %d not in catalog, matched '%s' in context",
                location_id,
                name,
            )
            return name, ADDRESS_UNAVAILABLE, None

        logger.debug("Station %d unresolved", location_id)
        return f"Location {location_id}", ADDRESS_UNAVAILABLE, None

    def extract_wait(self, context: str) -> tuple[float, str]:
        """Return ``(minutes, pattern_name)``; default when nothing matches."""
        for pattern in self.wait_patterns:
            match = pattern.regex.search(context)
            if match:
                minutes = float(match.group(1).replace(",", "."))
                return minutes, pattern.name
        return self.default_wait, "default"

    @staticmethod
    def extract_volume(context: str, raw_balance: str) -> tuple[float, str]:
        """Prefer the rendered ``N Lts.`` figure over the raw balance.

        The raw balance is validated even when the rendered figure wins,
        so a garbled ``saldo`` always marks the record as malformed.
        """
        balance = parse_number(raw_balance)
        match = _LITERS_RE.search(context)
        if match:
            return float(match.group(1).replace(",", "")), "rendered"
        return balance, "saldo"

    def enrich(
        self,
        location_id: int,
        secondary_id: int,
        context: str,
        raw_balance: str,
    ) -> Enrichment:
        """Resolve all derived fields for one fragment.

        Raises:
            MalformedRecordError: When no volume can be parsed.
        """
        name, address, override = self.resolve_identity(
            location_id, secondary_id, context
        )
        if override is not None:
            wait, wait_source = override, "catalog"
        else:
            wait, wait_source = self.extract_wait(context)
        volume, volume_source = self.extract_volume(context, raw_balance)

        return Enrichment(
            display_name=name,
            address=address,
            wait_minutes=wait,
            available_volume=volume,
            wait_source=wait_source,
            volume_source=volume_source,
        )
