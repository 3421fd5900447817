"""Domain exception classes for business logic errors."""

from typing import Optional


class DomainError(Exception):
    """Base class for all domain-specific errors."""

    pass


class ResourceNotFoundError(DomainError):
    """Raised when a requested resource cannot be found."""

    pass


class DocumentNotFoundError(ResourceNotFoundError):
    """Raised when a document id does not exist."""

    pass


class ChunkNotFoundError(ResourceNotFoundError):
    """Raised when a document has no chunk with the requested sequence number."""

    pass


class ValidationError(DomainError):
    """Raised when data validation fails."""

    pass


class ExtractionError(DomainError):
    """Raised when text cannot be extracted from a stored document.

    Fatal for the ingestion run that hits it.
    """

    pass


class EmbeddingError(DomainError):
    """Base class for failures producing an embedding.

    Non-fatal per chunk during ingestion; fatal for semantic search, where
    the query itself must be embedded.
    """

    pass


class EmptyInputError(EmbeddingError):
    """Raised when the text is empty after normalization."""

    pass


class DimensionMismatchError(EmbeddingError):
    """Raised when the provider returns a vector of unexpected size."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Embedding dimension mismatch: expected {expected}, got {actual}")


class ProviderError(EmbeddingError):
    """Raised when the embedding provider call fails or times out."""

    def __init__(self, message: str, provider_name: Optional[str] = None):
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}" if provider_name else message)


class SearchError(DomainError):
    """Raised when a search cannot be completed."""

    pass


class SearchTimeoutError(SearchError):
    """Raised when the vector store does not answer within the query timeout."""

    pass
