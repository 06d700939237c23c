from .fallback import FALLBACK_COUNTRIES
from .service import CatalogService

__all__ = ["CatalogService", "FALLBACK_COUNTRIES"]
