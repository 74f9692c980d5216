"""Probe server -- health, ping, download and upload endpoints."""

from .app import create_app, run

__all__ = ["create_app", "run"]
