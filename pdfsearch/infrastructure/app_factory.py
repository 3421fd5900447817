from collections.abc import AsyncGenerator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any, Awaitable, Dict, Optional

import anyio
import fastapi
from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.openapi.docs import get_redoc_html, get_swagger_ui_html
from fastapi.openapi.utils import get_openapi

from ..modules.common.utils.error_handler import register_exception_handlers
from .config.settings import EnvironmentOption, Settings, get_settings
from .database.session import create_tables
from .jobs import job_runner
from .logging import configure_logging, generate_correlation_id, get_logger, reset_correlation_id, set_correlation_id

logger = get_logger()

CORRELATION_HEADER = "X-Request-ID"


async def set_threadpool_tokens(number_of_tokens: int = 100) -> None:
    """Configure the number of threadpool tokens for anyio."""
    limiter = anyio.to_thread.current_default_thread_limiter()
    limiter.total_tokens = number_of_tokens


def lifespan_factory(
    settings: Settings,
    create_tables_on_startup: bool = True,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Factory to create a lifespan async context manager for a FastAPI app.

    On startup it configures logging, sizes the worker thread pool used by
    PDF extraction and optionally creates the tables. On shutdown it cancels
    ingestion jobs that are still pending.

    Args:
        settings: Application settings
        create_tables_on_startup: Whether to create database tables on startup

    Returns:
        An async context manager for FastAPI's lifespan
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        configure_logging()
        await set_threadpool_tokens()

        try:
            if create_tables_on_startup:
                await create_tables()

            logger.info(f"{app.title} started", extra={"environment": settings.ENVIRONMENT.value})
            yield

        finally:
            await job_runner.shutdown()

    return lifespan


async def correlation_id_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Bind the request's correlation id to every log record it produces."""
    correlation_id = request.headers.get(CORRELATION_HEADER) or generate_correlation_id()
    token = set_correlation_id(correlation_id)
    try:
        response = await call_next(request)
    finally:
        reset_correlation_id(token)
    response.headers[CORRELATION_HEADER] = correlation_id
    return response


def _docs_router(application: FastAPI, settings: Settings, metadata: Dict[str, Any]) -> APIRouter:
    docs_router = APIRouter()

    @docs_router.get(settings.DOCS_URL, include_in_schema=False)
    async def get_swagger_documentation() -> fastapi.responses.HTMLResponse:
        return get_swagger_ui_html(openapi_url=settings.OPENAPI_URL, title="docs")

    @docs_router.get(settings.REDOC_URL, include_in_schema=False)
    async def get_redoc_documentation() -> fastapi.responses.HTMLResponse:
        return get_redoc_html(openapi_url=settings.OPENAPI_URL, title="redoc")

    @docs_router.get(settings.OPENAPI_URL, include_in_schema=False)
    async def openapi() -> Dict[str, Any]:
        return get_openapi(
            title=metadata["title"],
            version=metadata["version"],
            description=metadata["description"],
            routes=application.routes,
        )

    return docs_router


def create_application(
    router: APIRouter,
    settings: Optional[Settings] = None,
    lifespan: Optional[Callable[[FastAPI], AbstractAsyncContextManager[None]]] = None,
    summary: Optional[str] = None,
    description: Optional[str] = None,
    **kwargs: Any,
) -> FastAPI:
    """Build the FastAPI application for the PDF search service.

    Middleware, CORS, compression and documentation routes are all driven by
    ``settings``. Interactive docs are hidden in production unless
    ``ENABLE_DOCS_IN_PRODUCTION`` is set.

    Args:
        router: Router holding every API route
        settings: Application settings (uses get_settings() if None)
        lifespan: Custom lifespan; defaults to :func:`lifespan_factory`
        summary: A short summary of the API
        description: A detailed description of the API (supports Markdown)
        **kwargs: Additional keyword arguments passed to FastAPI constructor

    Returns:
        A configured FastAPI application
    """
    if settings is None:
        settings = get_settings()

    metadata: Dict[str, Any] = {
        "title": settings.APP_NAME,
        "description": description or settings.APP_DESCRIPTION,
        "version": settings.VERSION,
    }
    if summary is not None:
        metadata["summary"] = summary

    if lifespan is None:
        lifespan = lifespan_factory(settings, create_tables_on_startup=settings.CREATE_TABLES_ON_STARTUP)

    application = FastAPI(lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None, **metadata, **kwargs)
    application.include_router(router)
    register_exception_handlers(application)

    if settings.LOG_CORRELATION_ID:
        application.middleware("http")(correlation_id_middleware)

    if settings.CORS_ENABLED:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS_LIST,
            allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
            allow_methods=settings.CORS_ALLOW_METHODS.split(","),
            allow_headers=settings.CORS_ALLOW_HEADERS.split(","),
        )

    if settings.GZIP_ENABLED:
        application.add_middleware(GZipMiddleware, minimum_size=settings.GZIP_MINIMUM_SIZE)

    hide_docs = settings.ENVIRONMENT == EnvironmentOption.PRODUCTION and not settings.ENABLE_DOCS_IN_PRODUCTION
    if not hide_docs:
        application.include_router(_docs_router(application, settings, metadata))

    return application
