"""Common constants used across the application."""

from typing import Dict, Type

from fastapi import status

from .exceptions import (
    DimensionMismatchError,
    DomainError,
    EmptyInputError,
    ExtractionError,
    ProviderError,
    ResourceNotFoundError,
    SearchError,
    SearchTimeoutError,
    ValidationError,
)

# Checked in order; subclasses must precede their bases.
EXCEPTION_STATUS_CODES: Dict[Type[DomainError], int] = {
    ResourceNotFoundError: status.HTTP_404_NOT_FOUND,
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    EmptyInputError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ExtractionError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    DimensionMismatchError: status.HTTP_502_BAD_GATEWAY,
    ProviderError: status.HTTP_502_BAD_GATEWAY,
    SearchTimeoutError: status.HTTP_504_GATEWAY_TIMEOUT,
    SearchError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

EXCEPTION_MESSAGES: Dict[Type[DomainError], str] = {
    ResourceNotFoundError: "Resource not found",
    ValidationError: "Invalid request",
    EmptyInputError: "Nothing to embed",
    ExtractionError: "Text extraction failed",
    DimensionMismatchError: "Embedding provider returned an invalid vector",
    ProviderError: "Embedding provider unavailable",
    SearchTimeoutError: "Search timed out",
    SearchError: "Search failed",
}
