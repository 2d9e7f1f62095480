"""LaunchAsset ORM model (``launch_assets`` table)."""

from typing import Optional

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from buildaura.models.db.base import Base, JSONType, OwnedRowMixin, TimestampMixin

__all__ = ["LaunchAsset"]


class LaunchAsset(OwnedRowMixin, TimestampMixin, Base):
    __tablename__ = "launch_assets"

    business_name: Mapped[str] = mapped_column(Text, nullable=False)
    industry: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    name_suggestions: Mapped[Optional[list]] = mapped_column(JSONType, nullable=True)
    logo_concepts: Mapped[Optional[list]] = mapped_column(JSONType, nullable=True)
    brand_colors: Mapped[Optional[list]] = mapped_column(JSONType, nullable=True)
    taglines: Mapped[Optional[list]] = mapped_column(JSONType, nullable=True)
    brand_voice: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)
