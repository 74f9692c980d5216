"""UI layer -- Rich dashboard and output formatters."""

from .dashboard import (
    ProgressDisplay,
    console,
    print_error,
    print_final_results,
    print_header,
    print_history,
    print_server_health,
)
from .output import create_result_json, format_text_result

__all__ = [
    "ProgressDisplay",
    "console",
    "create_result_json",
    "format_text_result",
    "print_error",
    "print_final_results",
    "print_header",
    "print_history",
    "print_server_health",
]
