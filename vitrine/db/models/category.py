from uuid import UUID

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vitrine.db.base import Base, ChildBase


class Category(Base):
    """Catalog category (sofas, tables, lighting...)."""

    __tablename__ = "categories"

    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    headline: Mapped[str | None] = mapped_column(String(500), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Hero banner
    hero_image: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    hero_alt: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # SEO fields
    seo_title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    seo_description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Ordering field
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False, index=True)

    highlights: Mapped[list["CategoryHighlight"]] = relationship(
        "CategoryHighlight",
        cascade="all, delete-orphan",
        order_by="CategoryHighlight.id",
        lazy="selectin",
    )


class CategoryHighlight(ChildBase):
    __tablename__ = "category_highlights"

    category_id: Mapped[UUID] = mapped_column(
        ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    text: Mapped[str] = mapped_column(String(500), nullable=False)
