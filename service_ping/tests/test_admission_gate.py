"""
Unit tests for the Ping admission gate.
"""

import pytest
import threading
from concurrent.futures import ThreadPoolExecutor
from structlog.testing import capture_logs

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_ping.app.admission import AdmissionGate, AdmissionStats
from service_ping.app.admission.gate import DEFAULT_THRESHOLD


class TestAdmissionGate:
    """Test cases for AdmissionGate."""

    @pytest.fixture
    def gate(self):
        """Create a gate with a small threshold."""
        return AdmissionGate(threshold=3)

    def test_default_threshold(self):
        """Test the default threshold is 100."""
        gate = AdmissionGate()
        assert gate.threshold == DEFAULT_THRESHOLD == 100
        assert gate.count == 0

    def test_admits_exactly_threshold_requests(self, gate):
        """Test the first `threshold` calls are admitted and later ones rejected."""
        decisions = [gate.admit() for _ in range(5)]

        assert decisions == [True, True, True, False, False]

    def test_rejections_do_not_advance_counter(self, gate):
        """Test only admitted requests count."""
        for _ in range(10):
            gate.admit()

        assert gate.count == 3
        stats = gate.stats()
        assert stats.admitted == 3
        assert stats.rejected == 7

    def test_rejection_is_permanent(self, gate):
        """Test the gate never reopens once closed."""
        for _ in range(3):
            gate.admit()

        assert all(gate.admit() is False for _ in range(50))

    def test_zero_threshold_rejects_everything(self):
        """Test a zero threshold closes the gate immediately."""
        gate = AdmissionGate(threshold=0)

        assert gate.admit() is False
        assert gate.count == 0

    def test_negative_threshold_rejected(self):
        """Test construction fails for a negative threshold."""
        with pytest.raises(ValueError):
            AdmissionGate(threshold=-1)

    def test_stats_snapshot(self, gate):
        """Test stats reflect counters and remaining budget."""
        gate.admit()

        stats = gate.stats()
        assert stats == AdmissionStats(admitted=1, rejected=0, threshold=3)
        assert stats.remaining == 2
        assert stats.to_dict() == {
            "admitted": 1,
            "rejected": 0,
            "threshold": 3,
            "remaining": 2
        }

    def test_remaining_never_negative(self):
        """Test remaining bottoms out at zero."""
        stats = AdmissionStats(admitted=5, rejected=2, threshold=3)
        assert stats.remaining == 0

    def test_concurrent_admission(self):
        """Test concurrent callers admit exactly `threshold` requests."""
        threshold, extra = 100, 40
        gate = AdmissionGate(threshold=threshold)
        start = threading.Barrier(20)

        def worker(n):
            start.wait()
            return [gate.admit() for _ in range(n)]

        per_worker = (threshold + extra) // 20
        with ThreadPoolExecutor(max_workers=20) as pool:
            results = [d for batch in pool.map(worker, [per_worker] * 20) for d in batch]

        assert results.count(True) == threshold
        assert results.count(False) == extra
        assert gate.count == threshold
        assert gate.stats().rejected == extra

    def test_rejection_is_silent(self, gate):
        """Test the gate leaves logging of rejections to its caller."""
        with capture_logs() as logs:
            for _ in range(5):
                gate.admit()

        assert logs == []
