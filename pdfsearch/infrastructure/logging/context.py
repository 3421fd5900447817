"""Context variables stamped on every log record.

Two identifiers travel with the current task:

- ``correlation_id``: set per HTTP request by the correlation middleware,
  or per background job by the job runner.
- ``document_id``: set while an ingestion run holds a document, so every
  record emitted during the run can be traced back to it.
"""

import contextvars
import logging
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

correlation_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("correlation_id", default=None)
document_id_var: contextvars.ContextVar[Optional[int]] = contextvars.ContextVar("document_id", default=None)


def generate_correlation_id() -> str:
    """Generate a new UUID-based correlation ID."""
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: str) -> contextvars.Token:
    """Set the correlation ID for the current context."""
    return correlation_id_var.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    """Get the correlation ID of the current context, if any."""
    return correlation_id_var.get()


def reset_correlation_id(token: contextvars.Token) -> None:
    correlation_id_var.reset(token)


@contextmanager
def document_context(document_id: int) -> Iterator[None]:
    """Bind ``document_id`` to every record logged inside the block."""
    token = document_id_var.set(document_id)
    try:
        yield
    finally:
        document_id_var.reset(token)


class ContextFilter(logging.Filter):
    """Logging filter copying the context variables onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_var.get() or "no-correlation"
        document_id = document_id_var.get()
        if document_id is not None and not hasattr(record, "document_id"):
            record.document_id = document_id
        return True
