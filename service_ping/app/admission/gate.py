"""
Admission gate for GET requests.

A single process-wide ceiling: once ``threshold`` GET requests have been
admitted, every later GET is rejected until the process restarts. There is no
time window and no per-client partitioning.
"""

import threading
from dataclasses import dataclass, asdict
from typing import Any, Dict


DEFAULT_THRESHOLD = 100


@dataclass(frozen=True)
class AdmissionStats:
    """Point-in-time view of the gate."""
    admitted: int
    rejected: int
    threshold: int

    @property
    def remaining(self) -> int:
        return max(self.threshold - self.admitted, 0)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["remaining"] = self.remaining
        return data


class AdmissionGate:
    """Counts admitted GET requests and rejects once the threshold is reached.

    Only admitted requests advance the counter; rejections are tallied
    separately and never influence later decisions. The read-compare-increment
    sequence runs under one lock, so concurrent callers can never push the
    admitted count past the threshold.
    """

    def __init__(self, threshold: int = DEFAULT_THRESHOLD):
        if threshold < 0:
            raise ValueError(f"threshold must be non-negative, got {threshold}")
        self._threshold = threshold
        self._admitted = 0
        self._rejected = 0
        self._lock = threading.Lock()

    @property
    def threshold(self) -> int:
        return self._threshold

    @property
    def count(self) -> int:
        """Number of GET requests admitted so far."""
        with self._lock:
            return self._admitted

    def admit(self) -> bool:
        """Decide whether one GET request may be served.

        Returns True and records the request when fewer than ``threshold``
        requests have been admitted; returns False otherwise.
        """
        with self._lock:
            if self._admitted >= self._threshold:
                self._rejected += 1
                return False
            self._admitted += 1
            return True

    def stats(self) -> AdmissionStats:
        """Snapshot the counters."""
        with self._lock:
            return AdmissionStats(
                admitted=self._admitted,
                rejected=self._rejected,
                threshold=self._threshold
            )
