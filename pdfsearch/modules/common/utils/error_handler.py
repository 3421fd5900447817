"""Mapping of domain exceptions to HTTP error envelopes."""

from typing import Tuple

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..constants import EXCEPTION_MESSAGES, EXCEPTION_STATUS_CODES
from ..exceptions import DomainError
from ..schemas import OperationResult


def map_exception(error: DomainError) -> Tuple[int, str]:
    """Return the HTTP status code and summary message for a domain error."""
    for exception_class, status_code in EXCEPTION_STATUS_CODES.items():
        if isinstance(error, exception_class):
            return status_code, EXCEPTION_MESSAGES[exception_class]

    return status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred"


def error_response(error: DomainError) -> JSONResponse:
    """Render a domain error as the ``{success, message, error}`` envelope."""
    status_code, message = map_exception(error)
    body = OperationResult[None].failure(message=message, error=str(error))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    """Register the global handler converting domain exceptions to responses."""

    @app.exception_handler(DomainError)
    async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
        return error_response(exc)
