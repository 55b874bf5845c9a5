"""Log sink selection for the notifier.

In development (``DEV`` present in the environment) everything goes to
standard output at DEBUG.  In production records are appended to a
fixed log file at INFO; when that file cannot be opened, typically
because the process lacks write access to ``/var/log/sgs``, records go
to standard output instead.
"""

from __future__ import annotations

import logging
import logging.config
from typing import Any, Dict

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _stdout_handler() -> Dict[str, Any]:
    return {
        "class": "logging.StreamHandler",
        "formatter": "default",
        "stream": "ext://sys.stdout",
    }


def _file_is_writable(path: str) -> bool:
    try:
        with open(path, "a", encoding="utf-8"):
            pass
    except OSError:
        return False
    return True


def configure_logging(dev: bool, log_file: str) -> str:
    """Configure the root logger and return a description of the sink.

    Args:
        dev: Development mode; stdout at DEBUG.
        log_file: Production log path.

    Returns:
        ``"stdout"`` or the path of the log file in use.
    """
    fell_back = False
    if dev:
        handler = _stdout_handler()
        level = "DEBUG"
        sink = "stdout"
    elif _file_is_writable(log_file):
        handler = {
            "class": "logging.FileHandler",
            "formatter": "default",
            "filename": log_file,
            "mode": "a",
            "encoding": "utf-8",
        }
        level = "INFO"
        sink = log_file
    else:
        handler = _stdout_handler()
        level = "INFO"
        sink = "stdout"
        fell_back = True

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": LOG_FORMAT, "datefmt": DATE_FORMAT},
            },
            "handlers": {"main": handler},
            "loggers": {
                "": {"handlers": ["main"], "level": level},
                # urllib3 logs every connection at DEBUG
                "urllib3": {"level": "WARNING"},
            },
        }
    )
    if fell_back:
        logging.getLogger(__name__).warning(
            "Cannot write to %s, logging to stdout instead", log_file
        )
    return sink
