"""
Background removal of expired records.

A record is only deleted once it has been expired for longer than the grace
period. Until then reads keep reporting it as expired instead of missing.
"""

import logging
import threading
from typing import Callable, List, Optional

from django.db import close_old_connections

from pastes.exceptions import CorruptRecord
from pastes.policy import NANOSECONDS_PER_SECOND, is_reapable, now_ns
from pastes.serializers import decode_record
from pastes.store import Store

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 60 * 60  # seconds
DEFAULT_GRACE = 4 * 60 * 60  # seconds


class Reaper:
    """
    Periodically deletes records whose grace period has run out.

    Shares nothing with request handling except the store.
    """

    def __init__(
        self,
        store: Store,
        interval: float = DEFAULT_INTERVAL,
        grace: float = DEFAULT_GRACE,
        clock: Callable[[], int] = now_ns,
    ):
        self.store = store
        self.interval = interval
        self.grace = int(grace * NANOSECONDS_PER_SECOND)
        self.clock = clock
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def sweep(self, now: Optional[int] = None) -> List[str]:
        """
        Delete every record expired for longer than the grace period.

        Scans under a read transaction first and deletes everything it found
        in one write transaction afterwards.

        Returns:
            Keys of the deleted entries
        """
        if now is None:
            now = self.clock()

        doomed: List[str] = []
        with self.store.begin() as tx:
            for key, raw in tx.items():
                try:
                    record = decode_record(raw, key)
                except CorruptRecord as exc:
                    logger.warning(f"Reaper skipping entry: {exc}")
                    continue
                if is_reapable(record, now, self.grace):
                    doomed.append(key)

        if doomed:
            with self.store.begin(writable=True) as tx:
                for key in doomed:
                    tx.delete(key)
            logger.info(f"Reaper deleted {len(doomed)} expired records from {self.store.bucket_name!r}")
        else:
            logger.debug("Reaper found nothing to delete")

        return doomed

    def run(self, stop_event: threading.Event) -> None:
        """Sweep every ``interval`` seconds until ``stop_event`` is set."""
        while not stop_event.wait(self.interval):
            try:
                self.sweep()
            except Exception:
                logger.exception("Reaper sweep failed")
            finally:
                close_old_connections()

    def start(self) -> threading.Thread:
        if self._thread is not None and self._thread.is_alive():
            return self._thread
        self._stop.clear()
        self._thread = threading.Thread(
            target=self.run, args=(self._stop,), name="pastes-reaper", daemon=True
        )
        self._thread.start()
        logger.info(
            f"Reaper started: every {self.interval}s, grace "
            f"{self.grace // NANOSECONDS_PER_SECOND}s"
        )
        return self._thread

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
