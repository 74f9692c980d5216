"""
Measurement engine -- runs the three probes in order and reports state.

The engine owns one explicit :class:`EngineState`.  Every change is pushed
to a single update channel (``on_update``) as a snapshot, so presentation
code never reaches into the engine or the testers.

State machine::

    idle -> latency -> download -> upload -> complete -> idle

Probes never overlap: concurrent transfers would distort each other's
timing.  There is no cancellation; a run either completes or raises
:class:`MeasurementError`.
"""
from __future__ import annotations

import asyncio
import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Tuple

import aiohttp

from .api import SpeedtestAPI
from .constants import (
    COMPLETE_DISPLAY_DELAY,
    DOWNLOAD_BAND,
    FAILED_MESSAGE,
    LATENCY_BAND,
    PHASE_DELAY,
    UPLOAD_BAND,
)
from .download import DownloadTester
from .exceptions import MeasurementError, SpeedcheckError
from .history import History, TestRecord
from .latency import LatencyTester
from .upload import UploadTester

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

class Phase(str, Enum):
    IDLE = "idle"
    LATENCY = "latency"
    DOWNLOAD = "download"
    UPLOAD = "upload"
    COMPLETE = "complete"


PHASE_MESSAGES = {
    Phase.IDLE: "",
    Phase.LATENCY: "Measuring latency...",
    Phase.DOWNLOAD: "Testing download speed...",
    Phase.UPLOAD: "Testing upload speed...",
    Phase.COMPLETE: "Test complete!",
}


@dataclass
class Results:
    """Current probe results; zero until the probe has finished."""

    download: float = 0.0
    upload: float = 0.0
    ping: float = 0.0

    def to_dict(self) -> dict:
        return {
            "download": round(self.download, 2),
            "upload": round(self.upload, 2),
            "ping": round(self.ping, 1),
        }


@dataclass
class EngineState:
    phase: Phase = Phase.IDLE
    message: str = ""
    progress: float = 0.0
    results: Results = field(default_factory=Results)
    error: str = ""
    testing: bool = False


UpdateCallback = Callable[[EngineState], None]


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class MeasurementEngine:
    """Sequential latency -> download -> upload orchestrator."""

    def __init__(
        self,
        api: SpeedtestAPI,
        latency: Optional[LatencyTester] = None,
        download: Optional[DownloadTester] = None,
        upload: Optional[UploadTester] = None,
        history: Optional[History] = None,
        phase_delay: float = PHASE_DELAY,
        complete_delay: float = COMPLETE_DISPLAY_DELAY,
        on_update: Optional[UpdateCallback] = None,
    ) -> None:
        self.api = api
        self.latency = latency or LatencyTester()
        self.download = download or DownloadTester()
        self.upload = upload or UploadTester()
        self.history = history if history is not None else History()
        self.phase_delay = phase_delay
        self.complete_delay = complete_delay
        self.on_update = on_update
        self.state = EngineState()

    # -- Update channel -----------------------------------------------------

    def snapshot(self) -> EngineState:
        return copy.deepcopy(self.state)

    def _emit(self) -> None:
        if self.on_update:
            self.on_update(self.snapshot())

    def _enter(self, phase: Phase) -> None:
        self.state.phase = phase
        self.state.message = PHASE_MESSAGES[phase]
        self._emit()

    def _set_progress(self, value: float) -> None:
        # Never move backwards within a run.
        value = min(max(value, 0.0), 100.0)
        if value > self.state.progress:
            self.state.progress = value
            self._emit()

    def _band_callback(self, band: Tuple[float, float]) -> Callable[[float], None]:
        lo, hi = band
        return lambda fraction: self._set_progress(lo + fraction * (hi - lo))

    # -- Public API ---------------------------------------------------------

    async def run(self) -> TestRecord:
        """Execute one full run and return the record added to history."""
        if self.state.testing:
            raise SpeedcheckError("A test is already running")

        self.state = EngineState(testing=True)
        self._emit()

        try:
            return await self._run_probes()
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError) as exc:
            # ValueError covers a reply body that is not valid JSON.
            failed_phase = self.state.phase.value
            self.state.error = FAILED_MESSAGE
            self._emit()
            logger.error("Speed test failed during %s: %s", failed_phase, exc)
            raise MeasurementError(FAILED_MESSAGE, phase=failed_phase) from exc
        finally:
            await asyncio.sleep(self.complete_delay)
            self.state.testing = False
            self.state.phase = Phase.IDLE
            self.state.message = PHASE_MESSAGES[Phase.IDLE]
            self.state.progress = 0.0
            self._emit()

    def reset(self) -> None:
        """Clear results and error; ignored while a run is in progress."""
        if self.state.testing:
            return
        self.state = EngineState()
        self._emit()

    # -- Internals ----------------------------------------------------------

    async def _run_probes(self) -> TestRecord:
        results = self.state.results

        self._enter(Phase.LATENCY)
        self.latency.on_progress = self._band_callback(LATENCY_BAND)
        latency = await self.latency.test(self.api)
        results.ping = latency.latency_ms
        self._set_progress(LATENCY_BAND[1])
        self._emit()

        await asyncio.sleep(self.phase_delay)

        self._enter(Phase.DOWNLOAD)
        self.download.on_progress = self._band_callback(DOWNLOAD_BAND)
        download = await self.download.test(self.api)
        results.download = download.speed_mbps
        self._emit()

        await asyncio.sleep(self.phase_delay)

        self._enter(Phase.UPLOAD)
        self.upload.on_progress = self._band_callback(UPLOAD_BAND)
        upload = await self.upload.test(self.api)
        results.upload = upload.speed_mbps

        self._set_progress(UPLOAD_BAND[1])
        self._enter(Phase.COMPLETE)

        record = TestRecord.now(
            download=results.download,
            upload=results.upload,
            ping=results.ping,
        )
        self.history.add(record)
        logger.info(
            "Run complete: ping %.1f ms, download %.2f Mbps, upload %.2f Mbps",
            record.ping, record.download, record.upload,
        )
        return record
