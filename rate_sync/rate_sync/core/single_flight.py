"""In-process single-flight guard.

Overlapping runs for the same shop (a manual /run while the scheduled run
is in flight) would race on the same metafields. The guard rejects the
second run instead of queueing it. It only covers one process; separate
processes sharing a shop still need an external lease.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from rate_sync.domain.exceptions import RunInProgressError

logger = logging.getLogger(__name__)


class SingleFlight:
    """Allows at most one active holder per key."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active: set[str] = set()

    def is_active(self, key: str) -> bool:
        with self._lock:
            return key in self._active

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """Hold ``key`` for the duration of the block.

        Raises:
            RunInProgressError: if ``key`` is already held.
        """
        with self._lock:
            if key in self._active:
                logger.warning(f"[Run] Rejected overlapping run for {key}")
                raise RunInProgressError(f"A run for {key} is already in progress", key=key)
            self._active.add(key)
        try:
            yield
        finally:
            with self._lock:
                self._active.discard(key)


# Global guard (in-memory, suitable for single-instance)
run_guard = SingleFlight()
