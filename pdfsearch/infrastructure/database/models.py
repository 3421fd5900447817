from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, MappedAsDataclass, mapped_column


class TimestampMixin(MappedAsDataclass):
    """Mixin adding timezone-aware ``created_at`` and ``updated_at`` columns.

    Both values are generated in UTC on insert; ``updated_at`` is refreshed by
    SQLAlchemy on every ORM update. The columns are excluded from the generated
    ``__init__`` so callers never set them by hand.

    Note:
        Bulk ``insert()``/``update()`` statements bypass ``onupdate`` hooks, so
        code issuing them sets ``updated_at`` explicitly.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default_factory=lambda: datetime.now(UTC),
        nullable=False,
        init=False,
    )

    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        default_factory=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=True,
        init=False,
    )
