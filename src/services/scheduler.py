# src/services/scheduler.py

"""Interval scheduler driving poll cycles without overlap."""

import asyncio
import logging
import signal
import time

from src.notifiers.message_formatter import format_error_alert, format_startup
from src.services.poll_cycle import CycleOutcome, PollCycle, PollState

logger = logging.getLogger("fuel_monitor.scheduler")


def seconds_until_next_run(now: float, interval: float) -> float:
    """Delay until the next wall-clock multiple of *interval*.

    With the default hourly interval this lands on the top of the hour.
    """
    if interval <= 0:
        raise ValueError("Poll interval must be positive")
    return interval - (now % interval)


class PollScheduler:
    """Fires :class:`PollCycle` runs on an aligned interval.

    Owns the single :class:`PollState`. A trigger that arrives while a
    cycle is still running is skipped.
    """

    def __init__(
        self,
        cycle: PollCycle,
        interval: float,
        run_on_start: bool = True,
        alert_on_errors: bool = False,
        state: PollState | None = None,
    ) -> None:
        self.cycle = cycle
        self.interval = interval
        self.run_on_start = run_on_start
        self.alert_on_errors = alert_on_errors
        self.state = state or PollState()
        self._lock = asyncio.Lock()
        self._stop_event = asyncio.Event()

    async def trigger(self) -> CycleOutcome | None:
        """Run one cycle now unless another one is in flight."""
        if self._lock.locked():
            logger.warning("Previous cycle still running, trigger skipped")
            return None
        async with self._lock:
            return await self._run_cycle()

    async def _run_cycle(self) -> CycleOutcome | None:
        try:
            new_state, outcome = await self.cycle.run(self.state)
        except Exception as exc:
            logger.error("Poll cycle failed: %s", exc, exc_info=True)
            self.state = self.state.record_failure(exc)
            if self.alert_on_errors:
                await self.cycle.notify(format_error_alert(exc))
            return None
        self.state = new_state
        return outcome

    def stop(self) -> None:
        """Ask the run loop to exit after the current cycle."""
        logger.info("Stop requested")
        self._stop_event.set()

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.stop)
            except (NotImplementedError, RuntimeError):
                logger.debug("Signal handler for %s unavailable", sig)

    async def announce(self) -> None:
        """Send the startup message (best effort)."""
        policy = self.cycle.policy
        await self.cycle.notify(
            format_startup(
                self.interval,
                policy.notify_only_on_change,
                policy.min_volume_threshold,
            )
        )

    async def start(self) -> PollState:
        """Run until :meth:`stop` or SIGINT/SIGTERM; return the final state."""
        self._install_signal_handlers()
        logger.info(
            "Scheduler started, interval=%.0fs run_on_start=%s",
            self.interval,
            self.run_on_start,
        )
        if self.run_on_start:
            await self.trigger()

        while not self._stop_event.is_set():
            delay = seconds_until_next_run(time.time(), self.interval)
            logger.debug("Next cycle in %.0fs", delay)
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
            except asyncio.TimeoutError:
                await self.trigger()

        logger.info(
            "Scheduler stopped after %d runs (%d failed)",
            self.state.runs,
            self.state.failures,
        )
        return self.state
