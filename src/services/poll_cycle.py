# src/services/poll_cycle.py

"""One poll cycle: fetch, parse, diff, notify, persist."""

import asyncio
import logging
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path

from src.config.settings import Settings
from src.extraction.snapshot_parser import SnapshotParser
from src.models.snapshot import Snapshot
from src.notifiers.message_formatter import format_summary
from src.notifiers.telegram_notifier import NotificationError, TelegramNotifier
from src.scrapers.base_scraper import TransportError
from src.scrapers.fuel_page_scraper import FuelPageScraper
from src.services.snapshot_differ import NotifyPolicy, find_notable_change
from src.storage.snapshot_store import SnapshotStore

logger = logging.getLogger("fuel_monitor.cycle")


@dataclass(frozen=True)
class PollState:
    """Everything a cycle needs from the previous ones.

    Replaced as a whole after each cycle; never mutated in place.
    """

    previous: Snapshot | None = None
    started_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    runs: int = 0
    failures: int = 0
    last_success_at: datetime | None = None
    last_error: str = ""

    def record_failure(self, error: BaseException) -> "PollState":
        """State after an aborted cycle; ``previous`` is kept."""
        return replace(
            self,
            runs=self.runs + 1,
            failures=self.failures + 1,
            last_error=str(error),
        )


@dataclass(frozen=True)
class CycleOutcome:
    """What a successful cycle produced."""

    snapshot: Snapshot
    notified: bool
    reason: str | None
    saved_path: Path | None


class PollCycle:
    """Runs a single fetch-to-persist pass against an explicit state."""

    def __init__(
        self,
        scraper: FuelPageScraper,
        parser: SnapshotParser,
        policy: NotifyPolicy,
        notifier: TelegramNotifier | None = None,
        store: SnapshotStore | None = None,
        fetch_timeout: float = Settings.FETCH_TIMEOUT,
        notify_timeout: float = Settings.NOTIFY_TIMEOUT,
    ) -> None:
        self.scraper = scraper
        self.parser = parser
        self.policy = policy
        self.notifier = notifier
        self.store = store
        self.fetch_timeout = fetch_timeout
        self.notify_timeout = notify_timeout

    async def _fetch(self) -> tuple[str, datetime]:
        try:
            page = await asyncio.wait_for(
                asyncio.to_thread(self.scraper.fetch),
                timeout=self.fetch_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise TransportError(
                f"Fetch timed out after {self.fetch_timeout:.0f}s"
            ) from exc
        return page.html, page.fetched_at

    async def notify(self, text: str) -> bool:
        """Send *text*; delivery failures are logged, never raised."""
        if self.notifier is None:
            logger.debug("No notifier configured, message dropped")
            return False
        try:
            await asyncio.wait_for(
                asyncio.to_thread(self.notifier.send, text),
                timeout=self.notify_timeout,
            )
        except asyncio.TimeoutError:
            logger.error(
                "Notification timed out after %.0fs", self.notify_timeout
            )
            return False
        except NotificationError as exc:
            logger.error("Notification failed: %s", exc)
            return False
        return True

    def _persist(self, snapshot: Snapshot) -> Path | None:
        if self.store is None:
            return None
        try:
            return self.store.save(snapshot)
        except OSError as exc:
            logger.error("Saving snapshot failed: %s", exc, exc_info=True)
            return None

    async def run(
        self, state: PollState,
    ) -> tuple[PollState, CycleOutcome]:
        """Execute one cycle and return the successor state.

        Raises:
            TransportError: The page could not be fetched; *state* is
                left as it was and the caller decides what to record.
        """
        start = time.monotonic()
        html, fetched_at = await self._fetch()
        snapshot = self.parser.parse(html, fetched_at)

        reason = find_notable_change(snapshot, state.previous, self.policy)
        notified = False
        if reason is not None:
            logger.info("Notifying: %s", reason)
            notified = await self.notify(
                format_summary(
                    snapshot,
                    self.policy.min_volume_threshold,
                    Settings.TIMEZONE,
                    Settings.HIGH_VOLUME_MARK,
                )
            )
        else:
            logger.info("No notable change, notification skipped")

        new_state = replace(
            state,
            previous=snapshot,
            runs=state.runs + 1,
            last_success_at=snapshot.observed_at,
            last_error="",
        )
        saved_path = self._persist(snapshot)

        logger.info(
            "Cycle finished in %.0fms: %d stations, notified=%s",
            (time.monotonic() - start) * 1000,
            len(snapshot.records),
            notified,
        )
        return new_state, CycleOutcome(
            snapshot=snapshot,
            notified=notified,
            reason=reason,
            saved_path=saved_path,
        )
