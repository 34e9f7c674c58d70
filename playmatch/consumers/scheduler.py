"""Background scheduler for matching tasks.

Runs periodic tasks:
- Purge expired availability windows
- Match every active window against upcoming open events

Integrates with FastAPI lifespan for clean startup/shutdown.
"""

import logging
import threading
from datetime import datetime

from playmatch.consumers.matching.runner import MatchingRunner
from playmatch.services.availability import AvailabilityRegistry
from playmatch.utilities.tz import now_utc

logger = logging.getLogger(__name__)


class MatchingScheduler:
    """Background scheduler for matching tasks.

    Runs periodic tasks in a daemon thread.

    Usage:
        scheduler = MatchingScheduler(runner, registry, interval_minutes=15)
        scheduler.start()
        # ... application runs ...
        scheduler.stop()

    FastAPI integration:
        @asynccontextmanager
        async def lifespan(app: FastAPI):
            scheduler = MatchingScheduler(runner, registry)
            scheduler.start()
            yield
            scheduler.stop()
    """

    def __init__(
        self,
        runner: MatchingRunner,
        availability: AvailabilityRegistry,
        interval_minutes: int = 15,
    ):
        """Initialize the scheduler.

        Args:
            runner: Matching runner invoked on every tick
            availability: Registry whose expired windows are purged
            interval_minutes: Minutes between task runs
        """
        self._runner = runner
        self._availability = availability
        self._interval_minutes = interval_minutes

        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._running = False
        self._last_run: datetime | None = None

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._running and self._thread is not None and self._thread.is_alive()

    @property
    def last_run(self) -> datetime | None:
        """Get time of last task run."""
        return self._last_run

    def start(self) -> bool:
        """Start the scheduler.

        Returns:
            True if started, False if already running
        """
        if self.is_running:
            logger.warning("Scheduler already running")
            return False

        self._stop_event.clear()
        self._running = True
        self._thread = threading.Thread(
            target=self._run_loop,
            name="matching-scheduler",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"Matching scheduler started (interval: {self._interval_minutes} minutes)")
        return True

    def stop(self, timeout: float = 30.0) -> bool:
        """Stop the scheduler gracefully.

        Args:
            timeout: Maximum seconds to wait for thread to stop

        Returns:
            True if stopped, False if timeout
        """
        if not self.is_running:
            return True

        logger.info("Stopping matching scheduler...")
        self._stop_event.set()
        self._running = False

        if self._thread:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Scheduler thread did not stop in time")
                return False

        logger.info("Matching scheduler stopped")
        return True

    def run_once(self) -> dict:
        """Run all scheduled tasks once (for testing/manual trigger).

        Returns:
            Dict with task results
        """
        return self._run_tasks()

    def _run_loop(self) -> None:
        """Main scheduler loop - runs in background thread."""
        interval_seconds = self._interval_minutes * 60

        # Run immediately on startup
        try:
            self._run_tasks()
        except Exception as e:
            logger.exception(f"Error in initial scheduler run: {e}")

        while not self._stop_event.is_set():
            # Wait for interval, waking early on stop
            if self._stop_event.wait(interval_seconds):
                return

            try:
                self._run_tasks()
            except Exception as e:
                logger.exception(f"Error in scheduler run: {e}")

    def _run_tasks(self) -> dict:
        """Run all scheduled tasks.

        Returns:
            Dict with task results
        """
        self._last_run = now_utc()
        results = {
            "started_at": self._last_run.isoformat(),
            "purge": {},
            "matching": {},
        }

        try:
            # Task 1: drop expired windows so they stop showing up anywhere
            results["purge"] = {"removed": self._availability.purge_expired()}
        except Exception as e:
            logger.warning(f"Purge task failed: {e}")
            results["purge"] = {"error": str(e)}

        try:
            # Task 2: full matching pass
            results["matching"] = self._runner.run_all().to_dict()
        except Exception as e:
            logger.warning(f"Matching task failed: {e}")
            results["matching"] = {"error": str(e)}

        results["completed_at"] = now_utc().isoformat()
        return results
