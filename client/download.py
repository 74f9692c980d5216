"""
Download speed test module.

Fetches a fixed-size chunk of random bytes a fixed number of times, one
request at a time.  Each trial is timed from request start until the whole
body has been read; the reported speed is the plain arithmetic mean of the
per-trial rates.  Any request failure propagates to the caller.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .api import SpeedtestAPI
from .constants import DOWNLOAD_CHUNK_MB, DOWNLOAD_DELAY, DOWNLOAD_ITERATIONS
from .stats import bytes_to_mb, calculate_mbps, calculate_mean

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass
class DownloadResult:
    """Download test result."""

    samples: List[float] = field(default_factory=list)
    speed_mbps: float = 0.0
    bytes_total: int = 0
    duration_ms: float = 0.0

    def calculate(self) -> None:
        self.speed_mbps = calculate_mean(self.samples)

    def to_dict(self) -> dict:
        return {
            "speed_mbps": round(self.speed_mbps, 2),
            "bytes_total": self.bytes_total,
            "duration_ms": round(self.duration_ms, 2),
            "samples": [round(s, 2) for s in self.samples],
        }


# ---------------------------------------------------------------------------
# Tester
# ---------------------------------------------------------------------------

class DownloadTester:
    """Sequential fixed-chunk download probe."""

    def __init__(
        self,
        iterations: int = DOWNLOAD_ITERATIONS,
        chunk_mb: int = DOWNLOAD_CHUNK_MB,
        delay: float = DOWNLOAD_DELAY,
    ) -> None:
        self.iterations = iterations
        self.chunk_mb = chunk_mb
        self.delay = delay
        self.on_progress: Optional[Callable[[float], None]] = None

    async def test(self, api: SpeedtestAPI) -> DownloadResult:
        result = DownloadResult()

        for i in range(self.iterations):
            start = time.perf_counter()
            body = await api.download(self.chunk_mb)
            elapsed = time.perf_counter() - start

            mbps = calculate_mbps(bytes_to_mb(len(body)), elapsed)
            result.samples.append(mbps)
            result.bytes_total += len(body)
            result.duration_ms += elapsed * 1000
            logger.debug(
                "Download trial %d: %d bytes in %.3f s (%.2f Mbps)",
                i + 1, len(body), elapsed, mbps,
            )

            if self.on_progress:
                self.on_progress((i + 1) / self.iterations)

            if i < self.iterations - 1:
                await asyncio.sleep(self.delay)

        result.calculate()
        return result
