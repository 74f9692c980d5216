"""
Probe server API client.

All HTTP work goes through a single ``aiohttp.ClientSession`` managed via
async-context-manager protocol (``async with SpeedtestAPI(endpoints) as api:
...``).  Each method performs exactly one request; timing is the caller's
job, so nothing here measures anything.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urljoin

import aiohttp

from .constants import (
    COMMON_HEADERS,
    DEFAULT_API_URL,
    DEFAULT_ORIGIN,
    DOWNLOAD_PATH,
    HEALTH_PATH,
    PING_PATH,
    UPLOAD_PATH,
    UPLOAD_RAW_PATH,
)


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------

@dataclass
class Endpoints:
    """Probe URLs derived from one API base URL."""

    base_url: str

    # -- Constructors -------------------------------------------------------

    @classmethod
    def from_base(
        cls,
        api_url: str = DEFAULT_API_URL,
        origin: str = DEFAULT_ORIGIN,
    ) -> Endpoints:
        """Build from *api_url*; a relative path is resolved against *origin*."""
        if api_url.startswith("/"):
            api_url = urljoin(origin.rstrip("/") + "/", api_url.lstrip("/"))
        return cls(base_url=api_url.rstrip("/"))

    # -- Derived URLs -------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path}"

    @property
    def ping_url(self) -> str:
        return self._url(PING_PATH)

    @property
    def download_url(self) -> str:
        return self._url(DOWNLOAD_PATH)

    @property
    def upload_url(self) -> str:
        """Multipart upload endpoint."""
        return self._url(UPLOAD_PATH)

    @property
    def upload_raw_url(self) -> str:
        """Raw octet-stream upload endpoint (used by the upload probe)."""
        return self._url(UPLOAD_RAW_PATH)

    @property
    def health_url(self) -> str:
        return self._url(HEALTH_PATH)

    # -- Serialisation ------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_url": self.base_url,
            "ping": self.ping_url,
            "download": self.download_url,
            "upload": self.upload_raw_url,
            "health": self.health_url,
        }


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------

class SpeedtestAPI:
    """Async context-manager wrapping the probe server's HTTP API."""

    def __init__(self, endpoints: Optional[Endpoints] = None) -> None:
        self.endpoints = endpoints or Endpoints.from_base()
        self._session: Optional[aiohttp.ClientSession] = None

    # -- Context manager ----------------------------------------------------

    async def __aenter__(self) -> SpeedtestAPI:
        # Transport default timeout only; a hung request blocks its probe.
        self._session = aiohttp.ClientSession(headers=COMMON_HEADERS)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._session:
            await self._session.close()
            self._session = None

    # -- Internal helpers ---------------------------------------------------

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError(
                "SpeedtestAPI must be used as an async context manager "
                "(async with SpeedtestAPI() as api: ...)"
            )
        return self._session

    # -- Public methods -----------------------------------------------------

    async def health(self) -> Dict[str, Any]:
        """Return the server's ``{status, timestamp, uptime}`` document."""
        session = self._ensure_session()

        async with session.get(self.endpoints.health_url) as resp:
            resp.raise_for_status()
            return await resp.json()

    async def ping(self) -> Dict[str, Any]:
        """One ping round trip; returns ``{timestamp, message}``."""
        session = self._ensure_session()

        async with session.get(self.endpoints.ping_url) as resp:
            resp.raise_for_status()
            return await resp.json()

    async def download(self, size_mb: int) -> bytes:
        """Fetch *size_mb* megabytes of random data and return the full body."""
        session = self._ensure_session()

        params = {"size": str(size_mb)}
        async with session.get(self.endpoints.download_url, params=params) as resp:
            resp.raise_for_status()
            return await resp.read()

    async def upload(self, payload: bytes) -> Dict[str, Any]:
        """POST *payload* as a raw octet-stream; returns the acknowledgment."""
        session = self._ensure_session()

        headers = {"Content-Type": "application/octet-stream"}
        async with session.post(
            self.endpoints.upload_raw_url,
            data=payload,
            headers=headers,
        ) as resp:
            resp.raise_for_status()
            return await resp.json()
