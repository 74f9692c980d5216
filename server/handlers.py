"""
Probe endpoint handlers.

Every handler is stateless: it reads the request, builds a response and
keeps nothing between requests.  The only values shared through the
application are read-only (start time, settings).
"""
import asyncio
import logging
import os
import re
import time
from datetime import datetime, timezone

import aiohttp
from aiohttp import web

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024
DEFAULT_DOWNLOAD_MB = 5
MAX_DOWNLOAD_MB = 50
MAX_UPLOAD_BYTES = 50 * BYTES_PER_MB

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

STARTED_AT = web.AppKey("started_at", float)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _epoch_ms() -> int:
    return int(time.time() * 1000)


def parse_size(raw):
    """Leading integer of *raw*; missing, unparsable or zero means the default."""
    if raw is None:
        return DEFAULT_DOWNLOAD_MB
    match = _LEADING_INT.match(raw)
    if not match:
        return DEFAULT_DOWNLOAD_MB
    return int(match.group(1)) or DEFAULT_DOWNLOAD_MB


def generate_random_data(size_mb: int) -> bytes:
    return os.urandom(size_mb * BYTES_PER_MB)


def upload_ack(received: int) -> dict:
    return {
        "success": True,
        "received": received,
        "receivedMB": round(received / BYTES_PER_MB, 2),
        "timestamp": _epoch_ms(),
    }


# ---------------------------------------------------------------------------
# Health / ping
# ---------------------------------------------------------------------------

async def health(request: web.Request) -> web.Response:
    return web.json_response({
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": time.monotonic() - request.app[STARTED_AT],
    })


async def ping(request: web.Request) -> web.Response:
    return web.json_response({"timestamp": _epoch_ms(), "message": "pong"})


# ---------------------------------------------------------------------------
# Download
# ---------------------------------------------------------------------------

async def download(request: web.Request) -> web.Response:
    size_mb = min(parse_size(request.query.get("size")), MAX_DOWNLOAD_MB)

    try:
        logger.info("[DOWNLOAD] Generating %sMB of random data...", size_mb)
        start = time.perf_counter()
        loop = asyncio.get_running_loop()
        data = await loop.run_in_executor(None, generate_random_data, size_mb)
        generation_ms = int((time.perf_counter() - start) * 1000)
    except (ValueError, OSError, MemoryError):
        logger.exception("[DOWNLOAD] Failed to generate %sMB", size_mb)
        return web.json_response(
            {"error": "Failed to generate download data"}, status=500
        )

    logger.info("[DOWNLOAD] Data generated in %dms", generation_ms)
    headers = {
        **NO_CACHE_HEADERS,
        "X-Data-Size": f"{size_mb}MB",
        "X-Generation-Time": f"{generation_ms}ms",
    }
    return web.Response(
        body=data,
        content_type="application/octet-stream",
        headers=headers,
    )


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------

async def upload_raw(request: web.Request) -> web.Response:
    try:
        body = await request.read()
    except (OSError, ValueError, aiohttp.ClientPayloadError):
        logger.exception("[UPLOAD-RAW] Failed to read request body")
        return web.json_response({"error": "Failed to process upload data"}, status=500)

    # client_max_size sits one byte above the limit so exactly 50 MB is accepted.
    if len(body) > MAX_UPLOAD_BYTES:
        raise web.HTTPRequestEntityTooLarge(max_size=MAX_UPLOAD_BYTES, actual_size=len(body))

    ack = upload_ack(len(body))
    logger.info("[UPLOAD-RAW] Received %.2fMB of data", ack["receivedMB"])
    return web.json_response(ack)


async def _read_data_part(request: web.Request) -> int:
    """Byte count of the multipart field ``data``; other fields are skipped."""
    if not request.content_type.startswith("multipart/"):
        return 0

    reader = await request.multipart()
    received = 0
    async for part in reader:
        if part.name != "data":
            continue
        while True:
            chunk = await part.read_chunk()
            if not chunk:
                break
            received += len(chunk)
            if received > MAX_UPLOAD_BYTES:
                raise web.HTTPRequestEntityTooLarge(
                    max_size=MAX_UPLOAD_BYTES, actual_size=received
                )
        break
    return received


async def upload(request: web.Request) -> web.Response:
    try:
        received = await _read_data_part(request)
    except (OSError, ValueError, aiohttp.ClientPayloadError):
        logger.exception("[UPLOAD] Failed to read multipart body")
        return web.json_response({"error": "Failed to process upload data"}, status=500)

    ack = upload_ack(received)
    logger.info("[UPLOAD] Received %.2fMB of data", ack["receivedMB"])
    return web.json_response(ack)
