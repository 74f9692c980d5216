"""
HTTP round-trip latency measurement.

Each trial times one ``GET /ping`` from request start to the parsed JSON
body.  A failed trial is not fatal: it contributes a fixed penalty sample
so a flaky link shows up as a high latency instead of aborting the run.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import aiohttp

from .api import SpeedtestAPI
from .constants import LATENCY_DELAY, LATENCY_ITERATIONS, LATENCY_PENALTY_MS
from .stats import calculate_mean

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass
class LatencyResult:
    """Aggregated latency data for one probe run."""

    samples: List[float] = field(default_factory=list)
    latency_ms: float = 0.0
    failures: int = 0

    def calculate(self) -> None:
        self.latency_ms = calculate_mean(self.samples)

    def to_dict(self) -> dict:
        return {
            "samples": [round(s, 1) for s in self.samples],
            "latency_ms": round(self.latency_ms, 1),
            "failures": self.failures,
        }


# ---------------------------------------------------------------------------
# Tester
# ---------------------------------------------------------------------------

class LatencyTester:
    """Sequential ping probe."""

    def __init__(
        self,
        iterations: int = LATENCY_ITERATIONS,
        delay: float = LATENCY_DELAY,
        penalty_ms: float = LATENCY_PENALTY_MS,
    ) -> None:
        self.iterations = iterations
        self.delay = delay
        self.penalty_ms = penalty_ms
        self.on_progress: Optional[Callable[[float], None]] = None

    async def test(self, api: SpeedtestAPI) -> LatencyResult:
        result = LatencyResult()

        for i in range(self.iterations):
            result.samples.append(await self._ping_once(api, result))

            if self.on_progress:
                self.on_progress((i + 1) / self.iterations)

            if i < self.iterations - 1:
                await asyncio.sleep(self.delay)

        result.calculate()
        return result

    async def _ping_once(self, api: SpeedtestAPI, result: LatencyResult) -> float:
        """Return elapsed ms, or the penalty value if the request failed."""
        start = time.perf_counter()
        try:
            await api.ping()
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError) as exc:
            result.failures += 1
            logger.warning("Ping failed, recording %.0f ms: %s", self.penalty_ms, exc)
            return self.penalty_ms

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug("Ping %.1f ms", elapsed_ms)
        return elapsed_ms
