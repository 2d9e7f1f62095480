"""Re-export Base and provide common column helpers for ORM models."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, ForeignKey, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from buildaura.database import Base

__all__ = ["Base", "JSONType", "OwnedRowMixin", "TimestampMixin", "utcnow"]

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OwnedRowMixin:
    """Primary key, owning user, and the prompt-history row that produced it.

    Every generated record belongs to exactly one user; all reads and
    deletes filter on ``user_id``.
    """

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    prompt_history_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("prompt_history.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )


class TimestampMixin:
    """Mixin that adds ``created_at`` and ``updated_at`` columns.

    Both are set client-side on insert and default to ``NOW()`` on the
    server side.  ``updated_at`` is also refreshed on every UPDATE.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )
