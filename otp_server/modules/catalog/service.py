"""Read-only catalog of countries, products and prices."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from otp_server.infrastructure.provider import FiveSimClient, PriceTable, ProductMap, ProviderError

from .fallback import FALLBACK_COUNTRIES

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CatalogService:
    provider: FiveSimClient

    async def list_countries(self) -> dict[str, str]:
        try:
            countries = await self.provider.list_countries()
        except ProviderError as exc:
            logger.warning("Using fallback country list: %s", exc)
            return dict(FALLBACK_COUNTRIES)
        if not countries:
            logger.warning("Provider returned no countries; using fallback list")
            return dict(FALLBACK_COUNTRIES)
        return countries

    async def list_products(self, country: str, operator: str = "any") -> ProductMap:
        return await self.provider.list_products(country, operator or "any")

    async def list_prices(self, country: str, product: str) -> PriceTable:
        return await self.provider.list_prices(country, product)
