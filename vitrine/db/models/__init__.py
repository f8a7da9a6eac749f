from vitrine.db.models.category import Category, CategoryHighlight
from vitrine.db.models.product import (
    Product,
    ProductAsset,
    ProductCustomization,
    ProductFinishOption,
    ProductMaterial,
    ProductMedia,
)

__all__ = ["Category", "CategoryHighlight", "Product", "ProductAsset", "ProductCustomization", "ProductFinishOption", "ProductMaterial", "ProductMedia"]
