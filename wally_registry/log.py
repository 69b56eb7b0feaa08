# Structured logging for the resolver CLI.
# Plain text by default, JSON lines (Loki/ELK compatible) with --json-logs.

import datetime
import json
import logging
import sys
from typing import Any, Dict

loggerNameOfWallyRegistry = "wally_registry"


class JsonLogFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON (JSONL).
    Extra fields passed through ``extra=`` are merged into the record.
    """

    _SKIP_FIELDS = frozenset({
        "name", "msg", "args", "created", "relativeCreated",
        "exc_info", "exc_text", "stack_info", "lineno", "funcName",
        "filename", "module", "levelno", "levelname", "pathname",
        "thread", "threadName", "process", "processName",
        "message", "msecs", "taskName",
    })

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()

        log_dict: Dict[str, Any] = {
            "timestamp": datetime.datetime.fromtimestamp(
                record.created, tz=datetime.timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "funcName": record.funcName,
            "message": record.message,
        }

        for key, value in record.__dict__.items():
            if key in self._SKIP_FIELDS or key.startswith("_"):
                continue
            try:
                json.dumps(value)
                log_dict[key] = value
            except (TypeError, ValueError):
                log_dict[key] = str(value)

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            log_dict["exception"] = record.exc_text

        return json.dumps(log_dict, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", json_format: bool = False) -> logging.Logger:
    """
    Attach a single stderr handler to the package logger.

    Calling it again replaces the handler instead of stacking another one.

    Returns:
        The ``wally_registry`` logger
    """
    logger = logging.getLogger(loggerNameOfWallyRegistry)
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(JsonLogFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(numeric_level)
    logger.propagate = False
    return logger
