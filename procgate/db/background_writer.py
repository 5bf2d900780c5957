"""Fire-and-forget executor for persistence writes off the request path."""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from typing import Any

logger = logging.getLogger("procgate.db.background_writer")


class BackgroundWriter:
    """Thread pool that runs persistence writes without blocking callers.

    Submitted writes are not ordered relative to each other. Failures are
    logged and never propagated to the submitter.
    """

    def __init__(self, max_workers: int = 4, thread_name_prefix: str = "procgate-writer"):
        """Initialize background writer.

        Args:
            max_workers: Concurrent write workers.
            thread_name_prefix: Worker thread name prefix.

        Raises:
            ValueError: Raised when max_workers is below one.
        """

        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=thread_name_prefix)

    def writer_submit(self, description: str, operation: Callable[..., Any], *args: Any) -> Future | None:
        """Schedule one write and return immediately.

        Args:
            description: Short label used in failure logs.
            operation: Callable performing the write.
            *args: Positional arguments passed to the callable.

        Returns:
            Future | None: Scheduled future, or None when the writer is closed.
        """

        try:
            future = self._executor.submit(operation, *args)
        except RuntimeError:
            logger.warning("background writer is closed, dropping write: %s", description)
            return None
        future.add_done_callback(partial(self._writer_log_failure, description))
        return future

    def writer_shutdown(self, wait: bool = True) -> None:
        """Stop accepting writes, optionally draining queued ones."""

        self._executor.shutdown(wait=wait)

    @staticmethod
    def _writer_log_failure(description: str, future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error("background write failed: %s: %s", description, error)
