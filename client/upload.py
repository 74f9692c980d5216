"""
Upload speed test module.

Each trial generates a fresh random payload, POSTs it to the raw upload
endpoint and waits for the JSON acknowledgment.  Speed comes only from
client-side timing around that request/response pair.
"""
from __future__ import annotations

import asyncio
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .api import SpeedtestAPI
from .constants import BYTES_PER_MB, UPLOAD_DELAY, UPLOAD_ITERATIONS, UPLOAD_PAYLOAD_MB
from .stats import calculate_mbps, calculate_mean

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    """Upload test result."""

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


def generate_payload(size_mb: int) -> bytes:
    """Random bytes from the OS CSPRNG, same source the server uses."""
    return os.urandom(size_mb * BYTES_PER_MB)


class UploadTester:
    """Sequential fixed-payload upload probe."""

    def __init__(
        self,
        iterations: int = UPLOAD_ITERATIONS,
        payload_mb: int = UPLOAD_PAYLOAD_MB,
        delay: float = UPLOAD_DELAY,
    ) -> None:
        self.iterations = iterations
        self.payload_mb = payload_mb
        self.delay = delay
        self.on_progress: Optional[Callable[[float], None]] = None

    async def test(self, api: SpeedtestAPI) -> UploadResult:
        result = UploadResult()

        for i in range(self.iterations):
            payload = generate_payload(self.payload_mb)

            start = time.perf_counter()
            ack = await api.upload(payload)
            elapsed = time.perf_counter() - start

            mbps = calculate_mbps(self.payload_mb, elapsed)
            result.samples.append(mbps)
            result.bytes_total += len(payload)
            result.duration_ms += elapsed * 1000
            logger.debug(
                "Upload trial %d: server acknowledged %s bytes in %.3f s (%.2f Mbps)",
                i + 1, ack.get("received"), elapsed, mbps,
            )

            if self.on_progress:
                self.on_progress((i + 1) / self.iterations)

            if i < self.iterations - 1:
                await asyncio.sleep(self.delay)

        result.calculate()
        return result
