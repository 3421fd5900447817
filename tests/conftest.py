"""Test configuration and fixtures for the PDF search project."""

import asyncio
import json
import os
import re
from typing import Dict, List, Optional, Sequence

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# mypy: disable-error-code="import-untyped"
from testcontainers.core.docker_client import DockerClient
from testcontainers.postgres import PostgresContainer

os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")
os.environ.setdefault("LOG_LEVEL", "ERROR")

from pdfsearch.infrastructure.config.settings import get_settings  # noqa: E402
from pdfsearch.infrastructure.database.session import Base, async_session  # noqa: E402
from pdfsearch.infrastructure.embedding import EmbeddingClient  # noqa: E402
from pdfsearch.infrastructure.embedding.base import Embedder  # noqa: E402
from pdfsearch.infrastructure.jobs import BackgroundJobRunner, DocumentLockRegistry  # noqa: E402
from pdfsearch.infrastructure.logging import configure_testing_logging  # noqa: E402
from pdfsearch.infrastructure.storage import InMemoryStore  # noqa: E402
from pdfsearch.modules.chunk.models import Chunk  # noqa: E402, F401
from pdfsearch.modules.document.models import Document  # noqa: E402, F401
from pdfsearch.modules.ingestion import IngestionPipeline, TextSegmenter  # noqa: E402

PGVECTOR_IMAGE = "pgvector/pgvector:pg16"

VOCABULARY = ["machine", "learning", "neural", "network", "cooking", "recipe", "garden", "history"]


class KeywordEmbedder(Embedder):
    """Deterministic embedder: one dimension per vocabulary word, counting occurrences.

    Texts containing any of ``fail_on`` raise, mimicking a provider error for
    that input. ``wrong_dimension_on`` texts come back one dimension short.
    """

    provider_name = "keyword-fake"

    def __init__(
        self,
        dimension: int = len(VOCABULARY),
        fail_on: Sequence[str] = (),
        wrong_dimension_on: Sequence[str] = (),
        delay: float = 0.0,
    ):
        self._dimension = dimension
        self.fail_on = list(fail_on)
        self.wrong_dimension_on = list(wrong_dimension_on)
        self.delay = delay
        self.calls: List[List[str]] = []

    @property
    def model_name(self) -> str:
        return "keyword-fake-v1"

    @property
    def dimension(self) -> int:
        return self._dimension

    def vector_for(self, text_value: str) -> List[float]:
        tokens = re.findall(r"\w+", text_value.lower())
        vector = [float(tokens.count(word)) for word in VOCABULARY]
        vector += [0.0] * (self._dimension - len(vector))
        if not any(vector):
            vector[-1] = 0.01
        return vector[: self._dimension]

    async def embed(self, texts: Sequence[str]) -> List[List[float]]:
        self.calls.append(list(texts))
        if self.delay:
            await asyncio.sleep(self.delay)
        for text_value in texts:
            if any(marker in text_value for marker in self.fail_on):
                raise RuntimeError(f"provider rejected input: {text_value[:20]}")

        vectors = []
        for text_value in texts:
            vector = self.vector_for(text_value)
            if any(marker in text_value for marker in self.wrong_dimension_on):
                vector = vector[:-1]
            vectors.append(vector)
        return vectors


class StaticExtractor:
    """Extractor returning fixed text per path, or raising for unknown paths."""

    def __init__(self, texts: Optional[Dict[str, str]] = None, error: Optional[Exception] = None):
        self.texts = texts or {}
        self.error = error
        self.calls: List[str] = []

    async def __call__(self, path: str) -> str:
        self.calls.append(path)
        if self.error is not None:
            raise self.error
        return self.texts[path]


@pytest.fixture(scope="session", autouse=True)
def quiet_logging():
    """Route log records nowhere during tests."""
    configure_testing_logging()


@pytest.fixture
def embedder() -> KeywordEmbedder:
    return KeywordEmbedder()


@pytest.fixture
def embedding_client(embedder: KeywordEmbedder) -> EmbeddingClient:
    return EmbeddingClient(embedder, max_input_chars=8000, timeout=2.0)


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def lock_registry() -> DocumentLockRegistry:
    return DocumentLockRegistry()


@pytest.fixture
def extractor() -> StaticExtractor:
    return StaticExtractor()


@pytest.fixture
def pipeline(memory_store, embedding_client, lock_registry, extractor) -> IngestionPipeline:
    return IngestionPipeline(
        documents=memory_store,
        store=memory_store,
        embedding_client=embedding_client,
        lock_registry=lock_registry,
        extractor=extractor,
        segmenter=TextSegmenter(max_chars=2000, min_chars=10),
    )


@pytest_asyncio.fixture
async def job_runner():
    runner = BackgroundJobRunner(retry_min_wait=0, retry_max_wait=0)
    yield runner
    await runner.shutdown()


@pytest.fixture
def pdf_file(tmp_path):
    """A stored file standing in for an uploaded PDF."""
    path = tmp_path / "report.pdf"
    path.write_bytes(b"%PDF-1.4 placeholder")
    return path


def is_docker_running() -> bool:
    """Check if Docker daemon is running."""
    try:
        DockerClient()
        return True
    except Exception:
        return False


@pytest.fixture(scope="session")
def pg_container():
    """Create a PostgreSQL container with the pgvector extension available."""
    if not is_docker_running():
        pytest.skip("Docker is required, but not running")

    with PostgresContainer(PGVECTOR_IMAGE) as pg:
        yield pg


@pytest.fixture
def test_db_url(pg_container) -> str:
    """Create a proper asyncpg URL for PostgreSQL."""
    host = pg_container.get_container_host_ip()
    port = pg_container.get_exposed_port(getattr(pg_container, "port", 5432))
    user = getattr(pg_container, "username", "test")
    password = getattr(pg_container, "password", "test")
    db = getattr(pg_container, "dbname", "test")

    return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db}"


@pytest_asyncio.fixture
async def test_db_engine(test_db_url):
    """Create a SQLAlchemy engine with the vector extension and all tables."""
    engine = create_async_engine(
        test_db_url,
        echo=False,
        json_serializer=lambda obj: json.dumps(obj, ensure_ascii=False),
    )
    async with engine.begin() as conn:
        await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """Create a test client where each request gets its own database session."""
    from pdfsearch.interfaces.main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides = {async_session: override_get_db}

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}


@pytest.fixture
def settings():
    return get_settings()
