"""PromptHistory ORM model.

Append-only audit trail: one row per successful generation call, written in
the same transaction as the generated records.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from buildaura.models.db.base import Base, utcnow

__all__ = ["PromptHistory"]


class PromptHistory(Base):
    __tablename__ = "prompt_history"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    tool_name: Mapped[str] = mapped_column(Text, nullable=False)
    prompt_summary: Mapped[str] = mapped_column("prompt", Text, nullable=False)
    response_body: Mapped[str] = mapped_column("response", Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
