from pydantic import BaseModel


class IngestionQueued(BaseModel):
    """Acknowledgement that ingestion of a document has been scheduled."""

    document_id: int
    queued: bool
    job_key: str
