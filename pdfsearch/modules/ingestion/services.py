"""Scheduling of ingestion runs on the background job runner."""

from ...infrastructure.jobs import BackgroundJobRunner
from ...infrastructure.logging import get_logger
from ..common.schemas import OperationResult
from .pipeline import IngestionPipeline
from .schemas import IngestionQueued

logger = get_logger()


def job_key(document_id: int) -> str:
    return f"ingest:{document_id}"


class IngestionService:
    """Fire-and-forget entry point for ingesting documents.

    Each document gets one job key, so asking again while a run for the same
    document is still queued or retrying does not schedule a second one.
    The job runner bounds every attempt by ``timeout`` seconds and, once
    ``max_attempts`` have failed, hands the last error to the pipeline's
    terminal failure handler.
    """

    def __init__(
        self,
        pipeline: IngestionPipeline,
        runner: BackgroundJobRunner,
        timeout: float = 600.0,
        max_attempts: int = 3,
    ):
        self.pipeline = pipeline
        self.runner = runner
        self.timeout = timeout
        self.max_attempts = max_attempts

    def ingest(self, document_id: int) -> OperationResult[IngestionQueued]:
        """Queue ingestion of a document.

        Must be called from within a running event loop.
        """
        key = job_key(document_id)

        async def on_failure(exc: BaseException) -> None:
            await self.pipeline.handle_terminal_failure(document_id, exc)

        queued = self.runner.submit(
            key,
            lambda: self.pipeline.run(document_id),
            timeout=self.timeout,
            max_attempts=self.max_attempts,
            on_failure=on_failure,
        )
        ticket = IngestionQueued(document_id=document_id, queued=queued, job_key=key)
        if not queued:
            return OperationResult.ok(ticket, message="Ingestion already queued")

        logger.info(f"Ingestion queued for document {document_id}")
        return OperationResult.ok(ticket, message="Ingestion queued")
