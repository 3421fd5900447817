"""Background job execution and per-document locking."""

from ..config.settings import settings
from .locks import DocumentLockRegistry
from .runner import BackgroundJobRunner

job_runner = BackgroundJobRunner(
    retry_min_wait=settings.INGESTION_RETRY_MIN_WAIT,
    retry_max_wait=settings.INGESTION_RETRY_MAX_WAIT,
)
document_locks = DocumentLockRegistry()

__all__ = ["BackgroundJobRunner", "DocumentLockRegistry", "document_locks", "job_runner"]
