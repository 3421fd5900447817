"""Database engine, session and model base."""

from .models import TimestampMixin
from .session import Base, async_session, create_tables, engine, local_session

__all__ = ["Base", "TimestampMixin", "async_session", "create_tables", "engine", "local_session"]
