"""BusinessPlan ORM model (``business_plans`` table)."""

from typing import Optional

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from buildaura.models.db.base import Base, JSONType, OwnedRowMixin, TimestampMixin

__all__ = ["BusinessPlan"]


class BusinessPlan(OwnedRowMixin, TimestampMixin, Base):
    __tablename__ = "business_plans"

    business_name: Mapped[str] = mapped_column(Text, nullable=False)
    industry: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    target_market: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    problem: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    solution: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    revenue_model: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    competition: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Section heading -> text, in the order the model produced them
    plan_content: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)
