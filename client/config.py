"""
User configuration file support.

Reads ``~/.speedcheck/config.json``::

    {
        "api_url": "http://localhost:5000/api",
        "origin": "http://localhost:5000"
    }

``origin`` is only consulted when ``api_url`` is relative (``/api``).
The ``SPEEDCHECK_API_URL`` environment variable overrides ``api_url`` from
the file, and an explicit ``--api-url`` on the command line overrides both.
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .constants import DEFAULT_API_URL, DEFAULT_ORIGIN

logger = logging.getLogger(__name__)

_CONFIG_DIR = os.path.join(Path.home(), ".speedcheck")
_CONFIG_FILE = "config.json"

API_URL_ENV = "SPEEDCHECK_API_URL"

DEFAULTS: Dict[str, Any] = {
    "api_url": DEFAULT_API_URL,
    "origin": DEFAULT_ORIGIN,
}


def _config_path() -> str:
    return os.path.join(_CONFIG_DIR, _CONFIG_FILE)


def load_config() -> Dict[str, Any]:
    """Defaults overlaid with whatever the config file provides."""
    path = _config_path()
    config = dict(DEFAULTS)

    if not os.path.isfile(path):
        return config

    try:
        with open(path, encoding="utf-8") as fh:
            user = json.load(fh)
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Ignoring unreadable config file %s: %s", path, exc)
        return config

    if isinstance(user, dict):
        config.update({k: v for k, v in user.items() if k in DEFAULTS})
    return config


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def resolve_api_url(cli_value: Optional[str] = None) -> str:
    """CLI flag, then environment, then config file, then the default."""
    if cli_value:
        return cli_value
    env_value = os.environ.get(API_URL_ENV)
    if env_value:
        return env_value
    return load_config().get("api_url") or DEFAULT_API_URL


def resolve_origin() -> str:
    return load_config().get("origin") or DEFAULT_ORIGIN
