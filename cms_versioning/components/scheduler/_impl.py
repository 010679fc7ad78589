"""
SchedulerPoller - background thread that runs scheduler scans.

Scans once on start, then at a fixed interval; stop() wakes the thread
immediately.
"""

from __future__ import annotations

import logging
import threading

from .component import run_process_due
from .models import ProcessDueInput, ProcessDueOutput
from .ports import DueVersionRepoPort, TimePort

logger = logging.getLogger(__name__)


class SchedulerPoller:
    """
    Runs run_process_due on a daemon thread.

    Used by the API lifespan when scheduling is enabled. trigger_now runs a
    scan synchronously on the caller's thread.
    """

    def __init__(
        self,
        repo: DueVersionRepoPort,
        time: TimePort,
        poll_interval_seconds: float = 60.0,
        max_versions: int = 10,
        actor: str = "scheduler",
    ) -> None:
        self._repo = repo
        self._time = time
        self._poll_interval = poll_interval_seconds
        self._input = ProcessDueInput(actor=actor, max_versions=max_versions)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._running = False

    def start(self) -> None:
        """Start the background poller."""
        if self._running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop, name="cms-scheduler", daemon=True
        )
        self._thread.start()
        self._running = True
        logger.info("Scheduler started (poll interval: %.1fs)", self._poll_interval)

    def stop(self) -> None:
        """Stop the poller and wait for the current scan to finish."""
        if not self._running:
            return

        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=5.0)
        self._running = False
        logger.info("Scheduler stopped")

    def trigger_now(self) -> ProcessDueOutput:
        """Run one scan immediately."""
        return run_process_due(self._input, repo=self._repo, time=self._time)

    @property
    def is_running(self) -> bool:
        return self._running

    def _poll_loop(self) -> None:
        # Drafts that fell due while stopped are published on the first pass
        while True:
            try:
                self.trigger_now()
            except Exception:
                logger.exception("Error in scheduler poll loop")
            if self._stop_event.wait(timeout=self._poll_interval):
                break
