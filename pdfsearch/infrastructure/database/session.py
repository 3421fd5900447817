import json
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, MappedAsDataclass

from ..config.settings import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.LOG_SQL_QUERIES,
    future=True,
    pool_size=settings.POSTGRES_POOL_SIZE,
    max_overflow=settings.POSTGRES_MAX_OVERFLOW,
    json_serializer=lambda obj: json.dumps(obj, ensure_ascii=False),
)

local_session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase, MappedAsDataclass):
    """Declarative base for all models.

    Combines SQLAlchemy's DeclarativeBase with MappedAsDataclass, so every
    model gets a generated ``__init__`` built from its mapped columns.
    Columns filled in by the database or by mixins are declared with
    ``init=False``.

    Example:
        ```python
        class Document(Base):
            __tablename__ = "documents"

            id: Mapped[int] = mapped_column(Integer, primary_key=True, init=False)
            title: Mapped[str] = mapped_column(String(255))

        document = Document(title="Annual report")
        ```
    """

    pass


async def async_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a request-scoped database session.

    Yields:
        AsyncSession: A session bound to the application engine.

    Example:
        ```python
        @router.get("/documents/{document_id}")
        async def get_document(document_id: int, db: AsyncSession = Depends(async_session)):
            ...
        ```
    """
    async_get_db = local_session
    async with async_get_db() as db:
        yield db


async def create_tables() -> None:
    """Enable pgvector and create all tables that do not exist yet.

    The ``vector`` extension must exist before ``metadata.create_all`` runs,
    since the chunk table declares a ``vector`` column and an HNSW index on it.
    Existing tables are left untouched; use a migration tool for schema changes.
    """
    async with engine.begin() as conn:
        await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        await conn.run_sync(Base.metadata.create_all)
