import logging
import logging.config
import os
from typing import Optional

from .config import Config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def build_logging_config(level: str, log_file: str = "") -> dict:
    handlers = {
        "console": {
            "class": "rich.logging.RichHandler",
            "formatter": "rich",
            "level": level,
            "rich_tracebacks": True,
            "show_path": False,
        },
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "filename": log_file,
            "formatter": "default",
            "level": level,
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT},
            "rich": {"format": "%(name)s: %(message)s", "datefmt": "[%X]"},
        },
        "handlers": handlers,
        "root": {
            "handlers": list(handlers),
            "level": level,
        },
    }


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None):
    level = (level or Config.LOG_LEVEL).upper()
    log_file = Config.LOG_FILE if log_file is None else log_file
    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
    logging.config.dictConfig(build_logging_config(level, log_file))
