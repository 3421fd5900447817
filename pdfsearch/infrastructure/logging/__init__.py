"""Centralized logging infrastructure.

Every module obtains its logger through ``get_logger()``. Configuration is
driven by ``LoggingSettings`` and the deployment environment, and each
record carries the current correlation id and, during ingestion, the
document id.

Usage:
    ```python
    from pdfsearch.infrastructure.logging import get_logger

    logger = get_logger()
    logger.info("Chunk embedded", extra={"sequence_number": 3})
    ```
"""

from .config import configure_testing_logging, setup_logging_configuration
from .context import (
    document_context,
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from .factory import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "configure_testing_logging",
    "document_context",
    "generate_correlation_id",
    "get_correlation_id",
    "get_logger",
    "reset_correlation_id",
    "set_correlation_id",
    "setup_logging_configuration",
]
