from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vitrine.db.base import Base, ChildBase

if TYPE_CHECKING:
    from vitrine.db.models.category import Category


class Product(Base):
    """Catalog product with its owned child collections."""

    __tablename__ = "products"

    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    category_id: Mapped[UUID] = mapped_column(ForeignKey("categories.id"), nullable=False, index=True)
    category: Mapped["Category"] = relationship("Category", lazy="selectin")

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Spec sheet
    designer: Mapped[str | None] = mapped_column(String(255), nullable=True)
    dimensions: Mapped[str | None] = mapped_column(String(255), nullable=True)
    light_source: Mapped[str | None] = mapped_column(String(255), nullable=True)
    lead_time: Mapped[str | None] = mapped_column(String(255), nullable=True)
    warranty: Mapped[str | None] = mapped_column(String(255), nullable=True)

    media: Mapped[list["ProductMedia"]] = relationship(
        "ProductMedia",
        cascade="all, delete-orphan",
        order_by="ProductMedia.position",
        lazy="selectin",
    )
    materials: Mapped[list["ProductMaterial"]] = relationship(
        "ProductMaterial",
        cascade="all, delete-orphan",
        order_by="ProductMaterial.id",
        lazy="selectin",
    )
    finish_options: Mapped[list["ProductFinishOption"]] = relationship(
        "ProductFinishOption",
        cascade="all, delete-orphan",
        order_by="ProductFinishOption.id",
        lazy="selectin",
    )
    customizations: Mapped[list["ProductCustomization"]] = relationship(
        "ProductCustomization",
        cascade="all, delete-orphan",
        order_by="ProductCustomization.id",
        lazy="selectin",
    )
    assets: Mapped[list["ProductAsset"]] = relationship(
        "ProductAsset",
        cascade="all, delete-orphan",
        order_by="ProductAsset.id",
        lazy="selectin",
    )


class ProductMedia(ChildBase):
    """Image shown in the product gallery, ordered by ``position``."""

    __tablename__ = "product_media"

    product_id: Mapped[UUID] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    src: Mapped[str] = mapped_column(String(1024), nullable=False)
    alt: Mapped[str | None] = mapped_column(String(500), nullable=True)


class ProductMaterial(ChildBase):
    __tablename__ = "product_materials"

    product_id: Mapped[UUID] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class ProductFinishOption(ChildBase):
    __tablename__ = "product_finish_options"

    product_id: Mapped[UUID] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class ProductCustomization(ChildBase):
    __tablename__ = "product_customizations"

    product_id: Mapped[UUID] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)


class ProductAsset(ChildBase):
    """Downloadable or linked resource (spec sheet, 3D model, video)."""

    __tablename__ = "product_assets"

    product_id: Mapped[UUID] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    url: Mapped[str] = mapped_column(String(1024), nullable=False)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
