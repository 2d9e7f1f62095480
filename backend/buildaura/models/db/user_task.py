"""UserTask ORM model (``user_tasks`` table)."""

from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Date, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from buildaura.models.db.base import Base, OwnedRowMixin, TimestampMixin

__all__ = ["UserTask"]


class UserTask(OwnedRowMixin, TimestampMixin, Base):
    __tablename__ = "user_tasks"

    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    priority: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    completed: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )
