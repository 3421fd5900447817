import logging
import os
from enum import Enum
from typing import List

from pydantic_settings import BaseSettings
from starlette.config import Config

logger = logging.getLogger(__name__)

current_file_dir = os.path.dirname(os.path.realpath(__file__))
project_root = os.path.abspath(os.path.join(current_file_dir, "..", "..", ".."))

env_paths = [
    "/code/.env",
    os.path.join(project_root, ".env"),
    "/.env",
]

env_path = next((path for path in env_paths if os.path.isfile(path)), env_paths[0])
logger.info(f"Using environment file at: {env_path}")

config = Config(env_path)


class EnvironmentOption(str, Enum):
    """Environment options for the application."""

    PRODUCTION = "production"
    STAGING = "staging"
    DEVELOPMENT = "development"
    LOCAL = "local"


class EnvironmentSettings(BaseSettings):
    """Environment-related settings."""

    ENVIRONMENT: EnvironmentOption = config("ENVIRONMENT", default=EnvironmentOption.DEVELOPMENT, cast=EnvironmentOption)


class DatabaseSettings(BaseSettings):
    """PostgreSQL (with the pgvector extension) connection settings."""

    POSTGRES_USER: str = config("POSTGRES_USER", default="postgres")
    POSTGRES_PASSWORD: str = config("POSTGRES_PASSWORD", default="postgres")
    POSTGRES_SERVER: str = config("POSTGRES_SERVER", default="localhost")
    POSTGRES_PORT: int = config("POSTGRES_PORT", default=5432, cast=int)
    POSTGRES_DB: str = config("POSTGRES_DB", default="pdfsearch")
    POSTGRES_ASYNC_PREFIX: str = config("POSTGRES_ASYNC_PREFIX", default="postgresql+asyncpg://")
    CREATE_TABLES_ON_STARTUP: bool = config("CREATE_TABLES_ON_STARTUP", default=True, cast=bool)

    POSTGRES_POOL_SIZE: int = config("POSTGRES_POOL_SIZE", default=20, cast=int)
    POSTGRES_MAX_OVERFLOW: int = config("POSTGRES_MAX_OVERFLOW", default=0, cast=int)

    @property
    def DATABASE_URL(self) -> str:
        """Get the full database URL."""
        return (
            f"{self.POSTGRES_ASYNC_PREFIX}{self.POSTGRES_USER}:"
            f"{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:"
            f"{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


class CORSSettings(BaseSettings):
    """CORS-related settings."""

    CORS_ENABLED: bool = config("CORS_ENABLED", default=True, cast=bool)
    CORS_ORIGINS: str = config("CORS_ORIGINS", default="*")
    CORS_ALLOW_CREDENTIALS: bool = config("CORS_ALLOW_CREDENTIALS", default=True, cast=bool)
    CORS_ALLOW_METHODS: str = config("CORS_ALLOW_METHODS", default="*")
    CORS_ALLOW_HEADERS: str = config("CORS_ALLOW_HEADERS", default="*")

    @property
    def CORS_ORIGINS_LIST(self) -> List[str]:
        """Get CORS origins as a list."""
        if not self.CORS_ORIGINS:
            return ["*"]
        return [x.strip() for x in self.CORS_ORIGINS.split(",") if x.strip()]


class CompressionSettings(BaseSettings):
    """Compression-related settings."""

    GZIP_ENABLED: bool = config("GZIP_ENABLED", default=True, cast=bool)
    GZIP_MINIMUM_SIZE: int = config("GZIP_MINIMUM_SIZE", default=1000, cast=int)


class APIDocSettings(BaseSettings):
    """API documentation settings."""

    ENABLE_DOCS_IN_PRODUCTION: bool = config("ENABLE_DOCS_IN_PRODUCTION", default=False, cast=bool)
    DOCS_URL: str = config("DOCS_URL", default="/docs")
    REDOC_URL: str = config("REDOC_URL", default="/redoc")
    OPENAPI_URL: str = config("OPENAPI_URL", default="/openapi.json")


class APISettings(BaseSettings):
    """API-related settings."""

    API_PREFIX: str = "/api"


class AppSettings(BaseSettings):
    """Application-related settings."""

    APP_NAME: str = "PDF Search API"
    APP_DESCRIPTION: str = "PDF ingestion with hybrid semantic and full-text retrieval"
    DEBUG: bool = config("DEBUG", default=False, cast=bool)
    VERSION: str = "0.1.0"


class EmbeddingSettings(BaseSettings):
    """Embedding provider settings.

    ``EMBEDDING_PROVIDER`` selects the network-backed OpenAI client (``openai``)
    or a local sentence-transformers model (``local``). The declared dimension
    is enforced on every vector the provider returns.
    """

    EMBEDDING_PROVIDER: str = config("EMBEDDING_PROVIDER", default="openai")
    OPENAI_API_KEY: str = config("OPENAI_API_KEY", default="")
    OPENAI_BASE_URL: str = config("OPENAI_BASE_URL", default="")
    EMBEDDING_MODEL: str = config("EMBEDDING_MODEL", default="text-embedding-3-small")
    EMBEDDING_DIMENSION: int = config("EMBEDDING_DIMENSION", default=1536, cast=int)
    EMBEDDING_MAX_INPUT_CHARS: int = config("EMBEDDING_MAX_INPUT_CHARS", default=8000, cast=int)
    EMBEDDING_TIMEOUT: float = config("EMBEDDING_TIMEOUT", default=30.0, cast=float)
    EMBEDDING_MAX_RETRIES: int = config("EMBEDDING_MAX_RETRIES", default=3, cast=int)
    LOCAL_EMBEDDING_MODEL: str = config("LOCAL_EMBEDDING_MODEL", default="all-mpnet-base-v2")


class IngestionSettings(BaseSettings):
    """Chunking, background job and upload settings."""

    CHUNK_MAX_CHARS: int = config("CHUNK_MAX_CHARS", default=2000, cast=int)
    CHUNK_MIN_CHARS: int = config("CHUNK_MIN_CHARS", default=10, cast=int)
    CHUNK_PREVIEW_CHARS: int = config("CHUNK_PREVIEW_CHARS", default=200, cast=int)
    CHUNK_SPLIT_OVERSIZED: bool = config("CHUNK_SPLIT_OVERSIZED", default=True, cast=bool)
    KEYWORD_LIMIT: int = config("KEYWORD_LIMIT", default=20, cast=int)

    INGESTION_MAX_ATTEMPTS: int = config("INGESTION_MAX_ATTEMPTS", default=3, cast=int)
    INGESTION_TIMEOUT: float = config("INGESTION_TIMEOUT", default=600.0, cast=float)
    INGESTION_RETRY_MIN_WAIT: float = config("INGESTION_RETRY_MIN_WAIT", default=5.0, cast=float)
    INGESTION_RETRY_MAX_WAIT: float = config("INGESTION_RETRY_MAX_WAIT", default=60.0, cast=float)
    INGESTION_CONCURRENCY: int = config("INGESTION_CONCURRENCY", default=1, cast=int)

    STORAGE_DIR: str = config("STORAGE_DIR", default=os.path.join(project_root, "storage", "documents"))
    UPLOAD_MAX_BYTES: int = config("UPLOAD_MAX_BYTES", default=10485760, cast=int)


class SearchSettings(BaseSettings):
    """Retrieval engine settings."""

    SEARCH_DEFAULT_LIMIT: int = config("SEARCH_DEFAULT_LIMIT", default=10, cast=int)
    SEARCH_MAX_LIMIT: int = config("SEARCH_MAX_LIMIT", default=20, cast=int)
    SEARCH_DEFAULT_THRESHOLD: float = config("SEARCH_DEFAULT_THRESHOLD", default=0.7, cast=float)
    SEARCH_HYBRID_THRESHOLD_FACTOR: float = config("SEARCH_HYBRID_THRESHOLD_FACTOR", default=0.8, cast=float)
    SEARCH_QUERY_TIMEOUT: float = config("SEARCH_QUERY_TIMEOUT", default=10.0, cast=float)
    SEARCH_PREVIEW_CHARS: int = config("SEARCH_PREVIEW_CHARS", default=200, cast=int)


class LoggingSettings(BaseSettings):
    """Centralized logging configuration settings."""

    LOG_LEVEL: str = config("LOG_LEVEL", default="INFO")
    LOG_FORMAT: str = config("LOG_FORMAT", default="structured")  # "simple", "detailed", "structured", "json"

    LOG_CONSOLE_ENABLED: bool = config("LOG_CONSOLE_ENABLED", default=True, cast=bool)
    LOG_FILE_ENABLED: bool = config("LOG_FILE_ENABLED", default=False, cast=bool)
    LOG_FILE_PATH: str = config("LOG_FILE_PATH", default="logs/pdfsearch.log")
    LOG_FILE_MAX_SIZE: int = config("LOG_FILE_MAX_SIZE", default=10485760, cast=int)
    LOG_FILE_BACKUP_COUNT: int = config("LOG_FILE_BACKUP_COUNT", default=5, cast=int)

    LOG_CORRELATION_ID: bool = config("LOG_CORRELATION_ID", default=True, cast=bool)
    LOG_SQL_QUERIES: bool = config("LOG_SQL_QUERIES", default=False, cast=bool)
    LOG_DEVELOPMENT_VERBOSE: bool = config("LOG_DEVELOPMENT_VERBOSE", default=True, cast=bool)
    LOG_PRODUCTION_OPTIMIZE: bool = config("LOG_PRODUCTION_OPTIMIZE", default=True, cast=bool)

    @property
    def LOG_LEVEL_INT(self) -> int:
        """Convert string log level to integer."""
        return logging.getLevelNamesMapping().get(self.LOG_LEVEL.upper(), logging.INFO)


class Settings(
    EnvironmentSettings,
    DatabaseSettings,
    CORSSettings,
    CompressionSettings,
    APIDocSettings,
    APISettings,
    AppSettings,
    EmbeddingSettings,
    IngestionSettings,
    SearchSettings,
    LoggingSettings,
):
    """Main settings class that combines all setting categories."""

    pass


settings = Settings()


def get_settings() -> Settings:
    """Get application settings.

    Returns:
        The application settings.
    """
    return settings
