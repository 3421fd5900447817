"""Logging formatters selectable by name.

Available formatters:
- ``simple``: ``[LEVEL] logger: message``
- ``detailed``: timestamped human-readable lines for development
- ``structured``: ``key=value`` pairs, readable and grep-friendly
- ``json``: one JSON object per line for log aggregation
"""

import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Type

_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
        "exc_info",
        "exc_text",
        "stack_info",
        "asctime",
    }
)


def extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Return the attributes added to a record through ``extra=`` or filters."""
    return {key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS}


class SimpleFormatter(logging.Formatter):
    """Format: ``[INFO] pdfsearch.modules.ingestion.pipeline: Ingestion finished``."""

    def __init__(self):
        super().__init__(fmt="[%(levelname)s] %(name)s: %(message)s")


class DetailedFormatter(logging.Formatter):
    """Timestamped format used on the development console.

    Extra fields are appended in parentheses so pipeline context such as
    ``document_id`` stays visible without switching to the structured format.
    """

    def __init__(self):
        super().__init__(fmt="%(asctime)s [%(levelname)8s] %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        context = {k: v for k, v in extra_fields(record).items() if k != "correlation_id" or v != "no-correlation"}
        if context:
            formatted += " (" + ", ".join(f"{k}={v}" for k, v in context.items()) + ")"
        return formatted


class StructuredFormatter(logging.Formatter):
    """``timestamp=... level=... module=... message="..." key=value`` lines."""

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            f"timestamp={datetime.now(timezone.utc).isoformat()}",
            f"level={record.levelname}",
            f"module={record.name}",
            f'message="{record.getMessage()}"',
        ]

        for key, value in extra_fields(record).items():
            if isinstance(value, (int, float, bool)):
                parts.append(f"{key}={value}")
            else:
                parts.append(f'{key}="{value}"')

        if record.exc_info:
            exc_text = self.formatException(record.exc_info).replace("\n", "\\n")
            parts.append(f'exception="{exc_text}"')

        return " ".join(parts)


class JSONFormatter(logging.Formatter):
    """Machine-readable JSON lines for production log pipelines."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line_number": record.lineno,
        }

        for key, value in extra_fields(record).items():
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            log_data["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_data, ensure_ascii=False)


FORMATTERS: Dict[str, Type[logging.Formatter]] = {
    "simple": SimpleFormatter,
    "detailed": DetailedFormatter,
    "structured": StructuredFormatter,
    "json": JSONFormatter,
}


def get_formatter(format_type: str) -> logging.Formatter:
    """Instantiate the formatter registered under ``format_type``.

    Raises:
        ValueError: If ``format_type`` is not a known formatter name.
    """
    formatter_class = FORMATTERS.get(format_type.lower())
    if formatter_class is None:
        raise ValueError(f"Unknown format type: {format_type}. Available: {', '.join(FORMATTERS)}")
    return formatter_class()
