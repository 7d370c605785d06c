# src/scrapers/fuel_page_scraper.py

"""Scraper for the public fuel balance page ("guía de saldos")."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlsplit

import cloudscraper  # type: ignore[import-untyped]

from src.scrapers.base_scraper import BaseScraper, TransportError


@dataclass(frozen=True)
class FetchedPage:
    """Raw page body plus when and where it was fetched."""

    html: str
    fetched_at: datetime
    url: str


class FuelPageScraper(BaseScraper):
    """Fetches the single station-balance page that the monitor polls."""

    def __init__(self, url: str | None = None) -> None:
        super().__init__("source")
        self.url = url or self.settings.SOURCE_URL

    def _get_homepage(self) -> str:
        """Return the scheme and host of the source page."""
        parts = urlsplit(self.url)
        return f"{parts.scheme}://{parts.netloc}/"

    def _fallback_get(self, headers: dict[str, str]) -> str | None:
        """Last resort through cloudscraper's JS challenge solver."""
        self.logger.info(
            "[%s] curl_cffi exhausted, falling back to cloudscraper",
            self.source_name,
        )
        try:
            _cs: Any = cloudscraper
            scraper: Any = _cs.create_scraper()
            resp: Any = scraper.get(
                self.url,
                headers=headers,
                timeout=self._request_timeout,
            )
            if resp.status_code == 200:
                return str(resp.text)
            self.logger.warning(
                "[%s] cloudscraper got HTTP %d",
                self.source_name,
                resp.status_code,
            )
        except Exception as e:
            self.logger.error(
                "[%s] cloudscraper fallback also failed: %s",
                self.source_name,
                e,
                exc_info=True,
            )
        return None

    def fetch(self) -> FetchedPage:
        """Download the page body.

        Raises:
            TransportError: When neither client returns a usable page.
        """
        if self._check_circuit():
            raise TransportError(
                f"Circuit open for {self.url}, skipping fetch"
            )
        headers: dict[str, str] = {
            **self.settings.DEFAULT_HEADERS,
            "Referer": self._get_homepage(),
        }

        resp = self._fetch_get(self.url, headers)
        html = resp.text if resp is not None else self._fallback_get(headers)
        if html is None:
            raise TransportError(f"Failed to fetch {self.url}")

        self.logger.info(
            "[%s] Fetched %d chars from %s",
            self.source_name,
            len(html),
            self.url,
        )
        return FetchedPage(
            html=html,
            fetched_at=datetime.now(timezone.utc),
            url=self.url,
        )
