"""Logging setup for coop-lending.

Desk operations log through a ``ContextAdapter`` so that every line of a
session carries its writer identity. With the JSON format the context
becomes top-level keys; with the standard format it is prefixed to the
message.
"""

import json
import logging
import sys
from collections.abc import Mapping, MutableMapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

QUIET_LOGGERS = ("openpyxl", "google", "grpc", "urllib3", "faker")

STANDARD_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(
    level: str = "INFO",
    format_type: str = "standard",
    log_file: Path | None = None,
) -> None:
    """Configure logging for coop-lending.

    Parameters
    ----------
    level : str
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    format_type : str
        Format type: "standard" or "json".
    log_file : Path | None
        Optional operations log, written in addition to stdout.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(fmt=STANDARD_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    logging.getLogger("coop_lending").setLevel(log_level)

    # SDK and spreadsheet libraries are chatty at INFO
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class JsonFormatter(logging.Formatter):
    """One JSON object per line; amounts and dates are written as strings."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        context = getattr(record, "extra", None)
        if isinstance(context, Mapping):
            log_data.update(context)

        return json.dumps(log_data, default=str)


class ContextAdapter(logging.LoggerAdapter):
    """Logger adapter that attaches fixed context, e.g. the desk session."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        context = {**self.extra, **extra.pop("extra", {})}
        extra["extra"] = context
        kwargs["extra"] = extra
        prefix = " ".join(f"{key}={value}" for key, value in self.extra.items())
        return (f"[{prefix}] {msg}" if prefix else msg), kwargs


def get_logger(name: str, **context: Any) -> logging.Logger | ContextAdapter:
    """Get a logger, wrapped in a ``ContextAdapter`` when context is given.

    Parameters
    ----------
    name : str
        Logger name (usually __name__).
    **context
        Fields attached to every record; None values are left out.

    Returns
    -------
    logging.Logger | ContextAdapter
        Configured logger.
    """
    logger = logging.getLogger(name)
    context = {key: value for key, value in context.items() if value is not None}
    if not context:
        return logger
    return ContextAdapter(logger, context)
