"""Delivery counters shared by all SMTP sessions of one backend.

One instance is owned by the backend and handed to every session it creates.
Sessions report each finished RCPT/DATA step through record_outcome(); nothing
else increments the tallies. Each outcome is mirrored to Prometheus.
"""

import threading
from typing import Optional, Tuple

from observability.metrics import smtp_deliveries_total


class DeliveryCounters:
    """Process-wide success/failure tally protected by a single lock."""

    def __init__(self):
        self._lock = threading.Lock()
        self._success = 0
        self._failure = 0

    def record_outcome(self, error: Optional[BaseException] = None) -> None:
        """Count one outcome.

        Args:
            error: Error that aborted the step, or None on success
        """
        with self._lock:
            if error is not None:
                self._failure += 1
            else:
                self._success += 1
        smtp_deliveries_total.labels(status="failure" if error is not None else "success").inc()

    def snapshot(self) -> Tuple[int, int]:
        """Return (success, failure) as one consistent pair."""
        with self._lock:
            return self._success, self._failure

    @property
    def success(self) -> int:
        return self.snapshot()[0]

    @property
    def failure(self) -> int:
        return self.snapshot()[1]

    def __repr__(self) -> str:
        success, failure = self.snapshot()
        return f"DeliveryCounters(success={success}, failure={failure})"
