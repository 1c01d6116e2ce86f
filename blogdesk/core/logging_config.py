"""JSON logging setup shared by the API process and the Celery workers."""

import logging
import sys

from pythonjsonlogger import jsonlogger

_QUIET_LOGGERS = ("uvicorn.access", "httpx", "sqlalchemy.engine", "celery.redirected")


def setup_logging(level: int = logging.INFO) -> None:
    """Send every record to stdout as one JSON object per line."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
