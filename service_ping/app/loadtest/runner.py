"""
Stepped load testing against a running service.

Each round fires ``tps`` requests per tick for ``window_seconds``, then
measures the failure rate. The rate climbs by ``step_tps`` per round until the
failure rate exceeds ``failure_threshold`` percent (the breaking point) or
``max_rounds`` is reached. Any non-2xx status or transport error counts as a
failure.
"""

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from shared.logging import get_logger


logger = get_logger("ping.loadtest")

DEFAULT_HEADERS = {"content-type": "application/json"}


def normalize_url(url: str) -> str:
    """Add a scheme to a bare URL.

    URLs that already start with ``http`` pass through; bare localhost
    addresses get ``http://``; everything else gets ``https://``.
    """
    url = url.strip()
    if url.startswith("http"):
        return url
    if "localhost" in url:
        return f"http://{url}"
    return f"https://{url}"


def parse_headers(raw: Optional[str]) -> Dict[str, str]:
    """Parse a JSON object of header names to values."""
    if raw is None or not raw.strip():
        return dict(DEFAULT_HEADERS)
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Headers must be a JSON object: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("Headers must be a JSON object")
    return {str(k): str(v) for k, v in data.items()}


@dataclass
class RequestSpec:
    """One request template."""
    url: str
    method: str = "GET"
    headers: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_HEADERS))
    body: Optional[str] = None


@dataclass
class RequestOutcome:
    """Result of sending one request."""
    status_code: Optional[int]
    text: str
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status_code is not None and 200 <= self.status_code < 300

    def describe(self) -> str:
        if self.error is not None:
            return f"Error while making request: {self.error}"
        if self.ok:
            return self.text
        return f"Status code: {self.status_code}, Error message: {self.text or 'No response body'}"


@dataclass
class LoadTestRound:
    tps: int
    successes: int
    failures: int

    @property
    def total(self) -> int:
        return self.successes + self.failures

    @property
    def failure_rate(self) -> float:
        """Failure percentage; 0.0 when nothing was sent."""
        if self.total == 0:
            return 0.0
        return self.failures / self.total * 100.0


@dataclass
class LoadTestReport:
    rounds: List[LoadTestRound] = field(default_factory=list)
    failure_threshold: float = 20.0
    breaking_tps: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "failure_threshold": self.failure_threshold,
            "breaking_tps": self.breaking_tps,
            "rounds": [
                {
                    "tps": r.tps,
                    "successes": r.successes,
                    "failures": r.failures,
                    "failure_rate": round(r.failure_rate, 2),
                }
                for r in self.rounds
            ],
        }


async def send_request(client: httpx.AsyncClient, spec: RequestSpec) -> RequestOutcome:
    """Send one request; transport errors become a failed outcome."""
    try:
        response = await client.request(
            spec.method,
            spec.url,
            headers=spec.headers,
            content=spec.body.encode() if spec.body is not None else None,
        )
    except httpx.HTTPError as e:
        return RequestOutcome(status_code=None, text="", error=str(e) or type(e).__name__)
    return RequestOutcome(status_code=response.status_code, text=response.text)


class StepLoadTester:
    """Ramp request rate until the target starts failing."""

    def __init__(
        self,
        spec: RequestSpec,
        client: Optional[httpx.AsyncClient] = None,
        start_tps: int = 10,
        step_tps: int = 10,
        window_seconds: float = 10.0,
        tick_seconds: float = 1.0,
        cooldown_seconds: float = 5.0,
        failure_threshold: float = 20.0,
        max_rounds: Optional[int] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if start_tps < 1 or step_tps < 0:
            raise ValueError("start_tps must be >= 1 and step_tps >= 0")
        if tick_seconds <= 0 or window_seconds <= 0:
            raise ValueError("window_seconds and tick_seconds must be positive")
        self.spec = spec
        self.client = client
        self.start_tps = start_tps
        self.step_tps = step_tps
        self.window_seconds = window_seconds
        self.tick_seconds = tick_seconds
        self.cooldown_seconds = cooldown_seconds
        self.failure_threshold = failure_threshold
        self.max_rounds = max_rounds
        self._sleep = sleep

    @property
    def ticks_per_round(self) -> int:
        return max(1, int(self.window_seconds / self.tick_seconds))

    async def run(self) -> LoadTestReport:
        """Run rounds until the breaking point or ``max_rounds``."""
        if self.client is not None:
            return await self._run(self.client)
        async with httpx.AsyncClient(timeout=10.0) as client:
            return await self._run(client)

    async def _run(self, client: httpx.AsyncClient) -> LoadTestReport:
        report = LoadTestReport(failure_threshold=self.failure_threshold)
        tps = self.start_tps
        logger.info("Running load test", url=self.spec.url, method=self.spec.method)

        while self.max_rounds is None or len(report.rounds) < self.max_rounds:
            result = await self.run_round(client, tps)
            report.rounds.append(result)
            logger.info(
                "Load test round complete",
                tps=tps,
                failure_rate=round(result.failure_rate, 2),
                successes=result.successes,
                failures=result.failures
            )

            if result.failure_rate > self.failure_threshold:
                report.breaking_tps = tps
                logger.warning(
                    "Breaking point reached",
                    tps=tps,
                    failure_threshold=self.failure_threshold
                )
                break

            tps += self.step_tps
            await self._sleep(self.cooldown_seconds)

        logger.info("Completed load test", rounds=len(report.rounds), breaking_tps=report.breaking_tps)
        return report

    async def run_round(self, client: httpx.AsyncClient, tps: int) -> LoadTestRound:
        """Fire ``tps`` requests per tick for one window."""
        tasks: List[asyncio.Task] = []
        for _ in range(self.ticks_per_round):
            for _ in range(tps):
                tasks.append(asyncio.create_task(send_request(client, self.spec)))
            await self._sleep(self.tick_seconds)

        outcomes = await asyncio.gather(*tasks)
        successes = sum(1 for outcome in outcomes if outcome.ok)
        return LoadTestRound(tps=tps, successes=successes, failures=len(outcomes) - successes)
