"""In-memory retention store.

This is the only component allowed to mutate the latest reading, the
history ring and the high-frequency ring.
"""

from __future__ import annotations

import threading
from collections import deque
from itertools import islice
from typing import Any

from pyhealthmon._constants import DEFAULT_HISTORY_LIMIT, HIGH_FREQUENCY_CAPACITY, HISTORY_CAPACITY
from pyhealthmon.ingestion.normalize import positive_int_or_default
from pyhealthmon.models.records import EnrichedReading, HighFrequencyPoint


class RetentionStore:
    """Latest snapshot plus two bounded drop-oldest rings.

    Rings are ordered by arrival (insertion) order, never by payload
    timestamp.  Every mutation happens under one lock so readers never see
    a ring half-updated; reads return lists of frozen models, never the
    live containers.
    """

    def __init__(
        self,
        *,
        history_capacity: int = HISTORY_CAPACITY,
        hf_capacity: int = HIGH_FREQUENCY_CAPACITY,
        default_history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        if history_capacity <= 0 or hf_capacity <= 0:
            raise ValueError("ring capacities must be positive")
        self._lock = threading.Lock()
        self._default_history_limit = default_history_limit
        self._latest: EnrichedReading | None = None
        self._history: deque[EnrichedReading] = deque(maxlen=history_capacity)
        self._hf: deque[HighFrequencyPoint] = deque(maxlen=hf_capacity)

    @property
    def history_capacity(self) -> int:
        return self._history.maxlen or 0

    @property
    def hf_capacity(self) -> int:
        return self._hf.maxlen or 0

    def record_full_reading(self, reading: EnrichedReading) -> None:
        """Replace the latest reading and append it to the history ring."""
        with self._lock:
            self._latest = reading
            self._history.append(reading)

    def record_high_frequency_sample(self, point: HighFrequencyPoint) -> None:
        with self._lock:
            self._hf.append(point)

    def latest(self) -> EnrichedReading | None:
        """Most recent full reading, or ``None`` if none was ever recorded."""
        with self._lock:
            return self._latest

    def history(self, limit: Any = None) -> list[EnrichedReading]:
        """Return the most recent *limit* readings, oldest first.

        *limit* is treated as untrusted input; anything that is not a
        positive number falls back to the default limit.
        """
        count = positive_int_or_default(limit, self._default_history_limit)
        with self._lock:
            size = len(self._history)
            if count >= size:
                return list(self._history)
            return list(islice(self._history, size - count, None))

    def high_frequency_samples(self) -> list[HighFrequencyPoint]:
        with self._lock:
            return list(self._hf)

    def clear(self) -> None:
        with self._lock:
            self._latest = None
            self._history.clear()
            self._hf.clear()

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "history_size": len(self._history),
                "history_capacity": self.history_capacity,
                "hf_size": len(self._hf),
                "hf_capacity": self.hf_capacity,
            }
