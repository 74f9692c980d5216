#!/usr/bin/env python3
"""
Speedcheck CLI -- run the probe server or measure against one.

Usage::

    python speedcheck.py serve                      # start the probe server
    python speedcheck.py serve --port 8080 --cors-origin https://app.example
    python speedcheck.py run                        # rich dashboard
    python speedcheck.py run --simple               # plain text
    python speedcheck.py run --json                 # JSON to stdout
    python speedcheck.py run --api-url http://host:5000/api
    python speedcheck.py run --repeat 5 --interval 60
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
import time
from typing import Optional

import aiohttp

from client.api import Endpoints, SpeedtestAPI
from client.config import resolve_api_url, resolve_origin
from client.constants import MAX_REPEAT, MIN_REPEAT
from client.engine import MeasurementEngine
from client.exceptions import MeasurementError
from client.history import History
from server import run as run_server
from server.logging_config import setup_logging
from ui.dashboard import (
    ProgressDisplay,
    console,
    print_error,
    print_final_results,
    print_header,
    print_history,
    print_server_health,
)
from ui.output import create_result_json, format_text_result

UNREACHABLE_MESSAGE = "No connection to the speed test server"


# ---------------------------------------------------------------------------
# Parameter validation
# ---------------------------------------------------------------------------

def _validate(repeat: int, interval: float) -> None:
    """Raise ``ValueError`` if any parameter is out of range."""
    if not MIN_REPEAT <= repeat <= MAX_REPEAT:
        raise ValueError(f"Repeat must be between {MIN_REPEAT} and {MAX_REPEAT}")
    if interval < 0:
        raise ValueError("Interval must not be negative")


# ---------------------------------------------------------------------------
# Core test runner
# ---------------------------------------------------------------------------

async def run_speedtest(
    *,
    api_url: str,
    history: History,
    json_output: bool = False,
    simple: bool = False,
) -> Optional[dict]:
    """Execute one measurement run and return a JSON-serialisable dict."""

    show_ui = not json_output and not simple
    endpoints = Endpoints.from_base(api_url, resolve_origin())

    if show_ui:
        print_header(endpoints.base_url)

    async with SpeedtestAPI(endpoints) as api:

        # -- Reachability ---------------------------------------------------
        try:
            health = await api.health()
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            print_error(f"{UNREACHABLE_MESSAGE}: {exc}", stderr=json_output)
            return None

        if show_ui:
            print_server_health(health)

        # -- Measurement ----------------------------------------------------
        progress = ProgressDisplay()
        engine = MeasurementEngine(api, history=history, on_update=progress.update)

        if show_ui:
            progress.start()
        try:
            record = await engine.run()
        except MeasurementError as exc:
            if show_ui:
                progress.stop()
                print_final_results(engine.state)
            print_error(str(exc), stderr=json_output)
            return None
        if show_ui:
            progress.stop()

        # -- Output ---------------------------------------------------------
        result_json = create_result_json(record, history, api_url=endpoints.base_url)

        if show_ui:
            print_final_results(engine.state)
            print_history(history)
        elif simple:
            print(format_text_result(record))
        else:
            print(json.dumps(result_json, indent=2))

        return result_json


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Speedcheck -- latency, download and upload measurement",
    )
    parser.add_argument("--log-level", type=str, default=None, metavar="LEVEL", help="Logging level (default: LOG_LEVEL or INFO)")
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the probe server")
    serve.add_argument("--host", type=str, default=None, help="Bind address (default: HOST or 0.0.0.0)")
    serve.add_argument("--port", type=int, default=None, help="Listen port (default: PORT or 5000)")
    serve.add_argument("--cors-origin", type=str, default=None, metavar="ORIGIN", help="Allowed CORS origin (default: CORS_ORIGIN)")

    run = commands.add_parser("run", help="Measure latency, download and upload")
    run.add_argument("--api-url", type=str, default=None, metavar="URL", help="Probe server API base URL")
    run.add_argument("--json", "-j", action="store_true", help="Output results as JSON")
    run.add_argument("--simple", "-s", action="store_true", help="Simple output mode (no dashboard)")
    run.add_argument("--repeat", type=int, default=1, metavar="N", help="Run the test N times (default: 1)")
    run.add_argument("--interval", type=float, default=60.0, metavar="SECS", help="Seconds between repeated tests (default: 60)")
    return parser


def main(argv: Optional[list] = None) -> None:
    args = _build_parser().parse_args(argv)

    if args.command == "serve":
        setup_logging(args.log_level)
        run_server(host=args.host, port=args.port, cors_origin=args.cors_origin)
        return

    # The dashboard owns the terminal; only warnings and worse go to the log.
    setup_logging(args.log_level or "WARNING")

    try:
        _validate(repeat=args.repeat, interval=args.interval)
    except ValueError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)

    api_url = resolve_api_url(args.api_url)
    history = History()
    failed = False

    try:
        for run_idx in range(args.repeat):
            if args.repeat > 1 and not args.json:
                console.print(f"\n[bold cyan]--- Run {run_idx + 1}/{args.repeat} ---[/bold cyan]")

            result = asyncio.run(
                run_speedtest(
                    api_url=api_url,
                    history=history,
                    json_output=args.json,
                    simple=args.simple,
                )
            )
            failed = failed or result is None

            # Wait between runs (but not after the last one)
            if run_idx < args.repeat - 1:
                if not args.json:
                    console.print(f"[dim]Next run in {args.interval:.0f}s...[/dim]")
                time.sleep(args.interval)

    except KeyboardInterrupt:
        console.print("\n[yellow]Test cancelled by user[/yellow]")
        sys.exit(1)

    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
