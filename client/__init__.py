"""Speedcheck client library -- probes, measurement engine, and statistics."""

from .api import Endpoints, SpeedtestAPI
from .download import DownloadResult, DownloadTester
from .engine import EngineState, MeasurementEngine, Phase, Results
from .exceptions import MeasurementError, SpeedcheckError
from .history import History, TestRecord
from .latency import LatencyResult, LatencyTester
from .stats import (
    calculate_mbps,
    calculate_mean,
    format_latency,
    format_speed,
)
from .upload import UploadResult, UploadTester

__all__ = [
    "DownloadResult",
    "DownloadTester",
    "Endpoints",
    "EngineState",
    "History",
    "LatencyResult",
    "LatencyTester",
    "MeasurementEngine",
    "MeasurementError",
    "Phase",
    "Results",
    "SpeedcheckError",
    "SpeedtestAPI",
    "TestRecord",
    "UploadResult",
    "UploadTester",
    "calculate_mbps",
    "calculate_mean",
    "format_latency",
    "format_speed",
]
