from vitrine.controllers.admin import CatalogAdminController
from vitrine.controllers.catalog import CatalogController, HealthController

__all__ = ["CatalogAdminController", "CatalogController", "HealthController"]
