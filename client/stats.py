"""
Measurement statistics.

Pure functions -- no I/O, no side effects.
Everything here is deterministic and easy to unit-test.
"""
from __future__ import annotations

import statistics
from typing import List

from .constants import BYTES_PER_MB


# ---------------------------------------------------------------------------
# Pure helper functions
# ---------------------------------------------------------------------------

def calculate_mean(samples: List[float]) -> float:
    """Arithmetic mean; ``0.0`` for an empty sample list."""
    if not samples:
        return 0.0
    return statistics.fmean(samples)


def bytes_to_mb(n_bytes: int) -> float:
    return n_bytes / BYTES_PER_MB


def calculate_mbps(megabytes: float, seconds: float) -> float:
    """Megabits per second for *megabytes* moved in *seconds*."""
    if seconds <= 0:
        return 0.0
    return (megabytes * 8) / seconds


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_speed(speed_mbps: float) -> str:
    """Human-readable speed string."""
    if speed_mbps >= 1000:
        return f"{speed_mbps / 1000:.2f} Gbps"
    return f"{speed_mbps:.2f} Mbps"


def format_latency(latency_ms: float) -> str:
    """Human-readable latency string."""
    if latency_ms >= 1000:
        return f"{latency_ms / 1000:.2f} s"
    return f"{latency_ms:.1f} ms"
