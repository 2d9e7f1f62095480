"""BusinessIdea ORM model (``business_ideas`` table)."""

from typing import Optional

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from buildaura.models.db.base import Base, JSONType, OwnedRowMixin, TimestampMixin

__all__ = ["BusinessIdea"]


class BusinessIdea(OwnedRowMixin, TimestampMixin, Base):
    __tablename__ = "business_ideas"

    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    difficulty: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    market_size: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    time_to_market: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    sort_order: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)

    # Wizard inputs that produced the idea
    skills_input: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    interests_input: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # problem / solution / target_audience / monetization / why_match
    details: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)
