# src/services/health_checker.py

"""Connectivity health checks for the source page and Telegram."""

import asyncio
import logging
import time
from dataclasses import dataclass

from src.extraction.fragment_locator import locate_fragments
from src.notifiers.telegram_notifier import TelegramNotifier
from src.scrapers.fuel_page_scraper import FuelPageScraper

logger = logging.getLogger("fuel_monitor.health")

_HEALTH_TIMEOUT = 10  # seconds per probe


@dataclass
class HealthResult:
    """Result of a single health probe."""

    source_id: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str


def probe_source(scraper: FuelPageScraper) -> HealthResult:
    """GET the source page once and check it still carries station data."""
    start = time.monotonic()
    try:
        headers = {
            **scraper.settings.DEFAULT_HEADERS,
            "Referer": scraper._get_homepage(),
        }
        resp = scraper.session.get(
            scraper.url,
            headers=headers,
            timeout=_HEALTH_TIMEOUT,
        )
        elapsed_ms = (time.monotonic() - start) * 1000

        if resp.status_code != 200:
            return HealthResult(
                source_id="source",
                status="down",
                latency_ms=elapsed_ms,
                message=f"HTTP {resp.status_code}",
            )

        fragments = sum(1 for _ in locate_fragments(resp.text))
        if fragments == 0:
            return HealthResult(
                source_id="source",
                status="down",
                latency_ms=elapsed_ms,
                message="No station data in page",
            )

        if elapsed_ms > 5000:
            return HealthResult(
                source_id="source",
                status="slow",
                latency_ms=elapsed_ms,
                message=f"High latency ({fragments} stations)",
            )

        return HealthResult(
            source_id="source",
            status="ok",
            latency_ms=elapsed_ms,
            message=f"{fragments} stations",
        )

    except Exception as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        return HealthResult(
            source_id="source",
            status="down",
            latency_ms=elapsed_ms,
            message=str(exc)[:80],
        )


def probe_telegram(notifier: TelegramNotifier) -> HealthResult:
    """Validate the bot token with ``getMe``."""
    if not notifier.token:
        return HealthResult(
            source_id="telegram",
            status="down",
            latency_ms=0.0,
            message="TELEGRAM_BOT_TOKEN not set",
        )
    start = time.monotonic()
    try:
        username = notifier.check()
    except Exception as exc:
        return HealthResult(
            source_id="telegram",
            status="down",
            latency_ms=(time.monotonic() - start) * 1000,
            message=str(exc)[:80],
        )
    return HealthResult(
        source_id="telegram",
        status="ok",
        latency_ms=(time.monotonic() - start) * 1000,
        message=f"@{username}" if username else "",
    )


class HealthChecker:
    """Runs the source and Telegram probes concurrently."""

    def __init__(
        self,
        scraper: FuelPageScraper | None = None,
        notifier: TelegramNotifier | None = None,
    ) -> None:
        self.scraper = scraper or FuelPageScraper()
        self.notifier = notifier or TelegramNotifier()

    async def check_all(self) -> list[HealthResult]:
        """Probe every dependency concurrently."""
        results: list[HealthResult] = list(
            await asyncio.gather(
                asyncio.to_thread(probe_source, self.scraper),
                asyncio.to_thread(probe_telegram, self.notifier),
            )
        )
        for r in results:
            logger.info(
                "Health check %s: %s (%.0fms) %s",
                r.source_id,
                r.status,
                r.latency_ms,
                r.message,
            )
        return results
