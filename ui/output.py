"""
Output formatting -- JSON document and plain text.
"""
from __future__ import annotations

from typing import Any, Dict

from client.history import History, TestRecord


def create_result_json(
    record: TestRecord,
    history: History,
    api_url: str = "",
) -> Dict[str, Any]:
    """Build a JSON-serialisable dict for one completed run."""
    avg_dl, avg_ul = history.averages()
    result: Dict[str, Any] = {
        **record.to_dict(),
        "history": history.to_list(),
        "averages": {
            "download": round(avg_dl, 2),
            "upload": round(avg_ul, 2),
        },
    }
    if api_url:
        result["api_url"] = api_url
    return result


def format_text_result(record: TestRecord) -> str:
    return (
        f"Ping: {record.ping:.1f} ms\n"
        f"Download: {record.download:.2f} Mbps\n"
        f"Upload: {record.upload:.2f} Mbps"
    )
