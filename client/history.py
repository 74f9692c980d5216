"""
In-memory test history.

Completed runs are kept newest first in a bounded list that lives only as
long as the process.  Nothing is written to disk.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .constants import MAX_HISTORY
from .stats import calculate_mean


# ---------------------------------------------------------------------------
# Record
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TestRecord:
    """One completed run: the three probe results plus capture time."""

    __test__ = False  # not a pytest test class

    timestamp: datetime
    download: float
    upload: float
    ping: float

    @classmethod
    def now(cls, download: float, upload: float, ping: float) -> TestRecord:
        return cls(
            timestamp=datetime.now(timezone.utc),
            download=download,
            upload=upload,
            ping=ping,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "download": round(self.download, 2),
            "upload": round(self.upload, 2),
            "ping": round(self.ping, 1),
        }


# ---------------------------------------------------------------------------
# Bounded history
# ---------------------------------------------------------------------------

class History:
    """Newest-first list of at most *max_entries* records."""

    def __init__(self, max_entries: int = MAX_HISTORY) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self.max_entries = max_entries
        self._records: List[TestRecord] = []

    def add(self, record: TestRecord) -> None:
        self._records.insert(0, record)
        del self._records[self.max_entries:]

    def clear(self) -> None:
        self._records.clear()

    @property
    def entries(self) -> List[TestRecord]:
        return list(self._records)

    @property
    def latest(self) -> Optional[TestRecord]:
        return self._records[0] if self._records else None

    def averages(self) -> Tuple[float, float]:
        """Mean (download, upload) over the retained records."""
        return (
            calculate_mean([r.download for r in self._records]),
            calculate_mean([r.upload for r in self._records]),
        )

    def to_list(self) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in self._records]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TestRecord]:
        return iter(list(self._records))

    def __getitem__(self, index: int) -> TestRecord:
        return self._records[index]


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------

def format_history_table(records: List[TestRecord]) -> List[dict]:
    """
    Flatten records into dicts suitable for tabular display.
    Each dict has: time, download, upload, ping.
    """
    rows = []
    for r in records:
        rows.append({
            "time": r.timestamp.astimezone().strftime("%H:%M:%S"),
            "download": f"{r.download:.1f}",
            "upload": f"{r.upload:.1f}",
            "ping": f"{r.ping:.0f}",
        })
    return rows


def sparkline(values: List[float]) -> str:
    """Single-line Unicode sparkline chart."""
    if not values:
        return ""
    bars = "▁▂▃▄▅▆▇█"
    lo, hi = min(values), max(values)
    span = hi - lo if hi > lo else 1.0
    return "".join(
        bars[min(int((v - lo) / span * (len(bars) - 1)), len(bars) - 1)]
        for v in values
    )
