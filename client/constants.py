"""
Shared constants used across all client modules.

Centralises magic numbers, default headers, and tunables so they live in
exactly one place.
"""

# ---------------------------------------------------------------------------
# HTTP headers
# ---------------------------------------------------------------------------

USER_AGENT = "speedcheck/0.1 (+aiohttp)"

# Every probe request must bypass caches on the way to the server.
COMMON_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "*/*",
    "Cache-Control": "no-cache, no-store",
    "Pragma": "no-cache",
}

# ---------------------------------------------------------------------------
# Probe server endpoints
# ---------------------------------------------------------------------------

DEFAULT_ORIGIN = "http://localhost:5000"
DEFAULT_API_URL = f"{DEFAULT_ORIGIN}/api"

PING_PATH = "ping"
DOWNLOAD_PATH = "download"
UPLOAD_PATH = "upload"
UPLOAD_RAW_PATH = "upload-raw"
HEALTH_PATH = "health"

# ---------------------------------------------------------------------------
# Data sizes
# ---------------------------------------------------------------------------

BYTES_PER_MB = 1024 * 1024

# ---------------------------------------------------------------------------
# Latency probe
# ---------------------------------------------------------------------------

LATENCY_ITERATIONS = 5
LATENCY_DELAY = 0.1              # seconds between pings
LATENCY_PENALTY_MS = 999.0       # recorded in place of a failed ping

# ---------------------------------------------------------------------------
# Download / upload probes
# ---------------------------------------------------------------------------

DOWNLOAD_ITERATIONS = 3
DOWNLOAD_CHUNK_MB = 5
DOWNLOAD_DELAY = 0.3

UPLOAD_ITERATIONS = 2
UPLOAD_PAYLOAD_MB = 3
UPLOAD_DELAY = 0.3

# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

PHASE_DELAY = 0.3                # pause between probes
COMPLETE_DISPLAY_DELAY = 1.0     # "complete" stays visible this long
MAX_HISTORY = 5

# Progress bands (percent) for each probe.
LATENCY_BAND = (0.0, 33.0)
DOWNLOAD_BAND = (33.0, 67.0)
UPLOAD_BAND = (67.0, 100.0)

FAILED_MESSAGE = "Test failed. Please try again."

# ---------------------------------------------------------------------------
# CLI limits
# ---------------------------------------------------------------------------

MIN_REPEAT = 1
MAX_REPEAT = 100
