"""In-memory fixed-window client tracker.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: one lock guards the whole map; lookup, decision and increment
  happen inside the same critical section.
- Windows are anchored to each client's own first (or reset) request and
  expire lazily, when that client's next request arrives.
- Records are never evicted, so memory grows with the number of distinct
  identities seen over the process lifetime.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable

from gateway.adapters.rate_limit.base import AbstractClientTracker, AdmissionResult
from gateway.core.errors import ConfigurationAppError


@dataclass
class _ClientRecord:
    count: int
    window_end: float


class ClientTracker(AbstractClientTracker):
    """Fixed-window request counter keyed by client identity.

    A client may send ``max_requests`` requests just before its window ends
    and another ``max_requests`` right after, i.e. up to twice the limit in a
    short real-time span. That is inherent to fixed-window counting.
    """

    def __init__(
        self,
        max_requests: int,
        window: timedelta,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the tracker.

        Args:
            max_requests: Maximum admitted requests per client per window.
            window: Fixed window duration.
            clock: Time source returning UNIX time in seconds.

        Raises:
            ConfigurationAppError: If max_requests or window is not positive.
        """
        if max_requests < 1:
            raise ConfigurationAppError(
                code="invalid_rate_limit",
                message="max_requests must be >= 1",
                details={"field": "max_requests", "value": str(max_requests)},
            )
        if window <= timedelta(0):
            raise ConfigurationAppError(
                code="invalid_rate_limit",
                message="time window must be positive",
                details={"field": "time_window", "value": str(window)},
            )

        self._max_requests = max_requests
        self._window_seconds = window.total_seconds()
        self._clock = clock
        self._lock = threading.Lock()
        self._clients: dict[str, _ClientRecord] = {}

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def window(self) -> timedelta:
        return timedelta(seconds=self._window_seconds)

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"ClientTracker(max_requests={self._max_requests}, "
            f"window_seconds={self._window_seconds}, clients={len(self._clients)})"
        )

    def consume(self, identity: str) -> AdmissionResult:
        """Admit or deny one request for ``identity`` and update its counter.

        A missing record, or one whose window ended strictly before now, is
        replaced by a fresh window with count 1. A saturated record denies
        without touching its count. Otherwise the count is incremented.
        """
        with self._lock:
            now = self._clock()
            record = self._clients.get(identity)

            if record is None or record.window_end < now:
                record = _ClientRecord(count=1, window_end=now + self._window_seconds)
                self._clients[identity] = record
                return AdmissionResult(
                    allowed=True,
                    count=1,
                    limit=self._max_requests,
                    window_end=record.window_end,
                    reset=True,
                )

            if record.count >= self._max_requests:
                return AdmissionResult(
                    allowed=False,
                    count=record.count,
                    limit=self._max_requests,
                    window_end=record.window_end,
                    retry_after_seconds=max(0, math.ceil(record.window_end - now)),
                )

            record.count += 1
            return AdmissionResult(
                allowed=True,
                count=record.count,
                limit=self._max_requests,
                window_end=record.window_end,
            )
