# RefreshScheduler
# Re-pulls the warehouse rows on a fixed interval in a background thread.

import threading
from typing import Optional

from config import REFRESH_INTERVAL_HOURS
from reconciliation.errors import SourceUnavailableError
from utils.logger import log_error, logger


class RefreshScheduler:
    """
    Calls ``service.refresh()`` every ``interval_hours`` until stopped.
    A failed refresh is logged and the previous snapshot stays in place.
    """

    def __init__(self, service, interval_hours: float = REFRESH_INTERVAL_HOURS):
        if interval_hours <= 0:
            raise ValueError("interval_hours must be positive")
        self.service = service
        self.interval_seconds = interval_hours * 3600
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> bool:
        """Run a single refresh. Returns True when the snapshot was replaced."""
        try:
            result = self.service.refresh()
        except SourceUnavailableError as e:
            log_error("Scheduled refresh failed", e)
            return False
        logger.info(f"Scheduled refresh loaded {result['rows']} rows")
        return True

    def start(self):
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="discrepancy-refresh", daemon=True)
        self._thread.start()
        logger.info(f"Refresh scheduler started (every {self.interval_seconds / 3600:g}h)")

    def stop(self, timeout: Optional[float] = None):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _loop(self):
        while not self._stop.wait(self.interval_seconds):
            self.run_once()
