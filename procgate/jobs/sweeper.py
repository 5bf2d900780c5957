"""Periodic eviction of expired terminal jobs from memory."""

from __future__ import annotations

import logging
import threading

from .registry import JobRegistry

logger = logging.getLogger("procgate.jobs.sweeper")


class RetentionSweeper:
    """Daemon thread running `job_registry_evict_expired` on a fixed interval."""

    def __init__(self, registry: JobRegistry, interval_seconds: float = 3600.0):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self._registry = registry
        self._interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def sweeper_start(self) -> None:
        """Start the sweep thread. Calling it on a running sweeper has no effect."""

        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._sweeper_loop, name="procgate-retention-sweeper", daemon=True)
        self._thread.start()
        logger.info("retention sweeper started interval_seconds=%s", self._interval_seconds)

    def sweeper_stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def sweeper_run_once(self) -> int:
        evicted_count = self._registry.job_registry_evict_expired()
        if evicted_count:
            logger.info("retention sweep evicted %d jobs", evicted_count)
        return evicted_count

    def _sweeper_loop(self) -> None:
        while not self._stop_event.wait(self._interval_seconds):
            self.sweeper_run_once()
