"""Logger factory with lazy configuration and calling-module detection."""

import inspect
import logging
from threading import Lock
from typing import Any, MutableMapping, Optional, Tuple, Union

from ..config.settings import get_settings
from .config import setup_logging_configuration

_logging_configured = False
_configuration_lock = Lock()


class ContextLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter merging its bound context with per-call ``extra``.

    The standard adapter replaces ``extra`` wholesale; this one lets a call
    add fields on top of the bound ones, with the call's values winning.
    """

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        bound = dict(self.extra) if self.extra else {}
        call_extra = kwargs.get("extra")
        if isinstance(call_extra, dict):
            bound.update(call_extra)
        kwargs["extra"] = bound
        return msg, kwargs


def get_logger(name: Optional[str] = None, **bound_context: Any) -> Union[logging.Logger, ContextLoggerAdapter]:
    """Get a configured logger, named after the calling module by default.

    Args:
        name: Logger name. Detected from the caller's module when omitted.
        **bound_context: Fields attached to every record from this logger.

    Example:
        ```python
        logger = get_logger()
        logger.info("Ingestion finished", extra={"document_id": 42, "status": "completed"})

        store_logger = get_logger(component="vector_store")
        store_logger.debug("Nearest-neighbour query issued")
        ```
    """
    _ensure_logging_configured()

    if name is None:
        name = _detect_calling_module()

    base_logger = logging.getLogger(name)
    if bound_context:
        return ContextLoggerAdapter(base_logger, bound_context)
    return base_logger


def configure_logging() -> None:
    """Configure logging now instead of on the first ``get_logger`` call."""
    global _logging_configured

    with _configuration_lock:
        if _logging_configured:
            return
        setup_logging_configuration()
        _logging_configured = True

        settings = get_settings()
        logging.getLogger(__name__).info(
            f"Logging configured for {settings.ENVIRONMENT.value} environment",
            extra={
                "log_level": settings.LOG_LEVEL,
                "log_format": settings.LOG_FORMAT,
                "file_enabled": settings.LOG_FILE_ENABLED,
            },
        )


def _ensure_logging_configured() -> None:
    if not _logging_configured:
        configure_logging()


def _detect_calling_module() -> str:
    """Return ``__name__`` of the module that called ``get_logger``."""
    frame = inspect.currentframe()
    try:
        for _ in range(2):
            if frame is None:
                break
            frame = frame.f_back
        if frame is None:
            return "unknown"
        return str(frame.f_globals.get("__name__", "unknown"))
    finally:
        del frame
