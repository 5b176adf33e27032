"""
Load-test client for the Ping service.

Sends single requests for manual poking and runs stepped load tests that
ramp the request rate until the target's failure rate crosses a threshold.
"""

from .runner import (
    LoadTestReport,
    LoadTestRound,
    RequestOutcome,
    RequestSpec,
    StepLoadTester,
    normalize_url,
    parse_headers,
    send_request,
)

__all__ = [
    "LoadTestReport",
    "LoadTestRound",
    "RequestOutcome",
    "RequestSpec",
    "StepLoadTester",
    "normalize_url",
    "parse_headers",
    "send_request",
]
