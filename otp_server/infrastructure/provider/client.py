"""HTTP client for the 5sim number-rental API.

Catalog endpoints are called as guest; order endpoints carry the bearer key.
Every call either returns a validated model or raises a ``ProviderError``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from otp_server.core.config import ProviderSettings

from .exceptions import ProviderDataInvalid, ProviderUnavailable
from .schemas import (
    PriceTable,
    ProductMap,
    ProviderOrder,
    ProviderOrderStatus,
    prices_adapter,
    products_adapter,
)

logger = logging.getLogger(__name__)


class FiveSimClient:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @classmethod
    def from_settings(cls, settings: ProviderSettings) -> "FiveSimClient":
        if not settings.api_key:
            logger.warning("PROVIDER__API_KEY is not configured; order endpoints will be rejected")
        return cls(settings.base_url, settings.api_key, timeout=settings.timeout_seconds)

    async def aclose(self) -> None:
        await self._client.aclose()

    # Catalog

    async def list_countries(self) -> dict[str, str]:
        payload = await self._get("/guest/countries")
        if not isinstance(payload, dict):
            raise ProviderDataInvalid("countries: expected an object")
        countries: dict[str, str] = {}
        for code, info in payload.items():
            if isinstance(info, dict):
                countries[code] = info.get("text_en") or code
            elif isinstance(info, str):
                countries[code] = info
        return countries

    async def list_products(self, country: str, operator: str = "any") -> ProductMap:
        payload = await self._get(f"/guest/products/{country}/{operator}")
        return self._parse_adapter(products_adapter, payload, "products")

    async def list_prices(self, country: str, product: str) -> PriceTable:
        payload = await self._get("/guest/prices", params={"country": country, "product": product})
        return self._parse_adapter(prices_adapter, payload, "prices")

    # Orders

    async def buy(self, country: str, operator: str, product: str) -> ProviderOrder:
        payload = await self._get(f"/user/buy/activation/{country}/{operator}/{product}", auth=True)
        return self._parse(ProviderOrder, payload, "buy")

    async def check(self, provider_id: str) -> ProviderOrder:
        payload = await self._get(f"/user/check/{provider_id}", auth=True)
        return self._parse(ProviderOrder, payload, "check")

    async def cancel(self, provider_id: str) -> ProviderOrderStatus:
        payload = await self._get(f"/user/cancel/{provider_id}", auth=True)
        return self._parse(ProviderOrderStatus, payload, "cancel")

    async def finish(self, provider_id: str) -> ProviderOrderStatus:
        payload = await self._get(f"/user/finish/{provider_id}", auth=True)
        return self._parse(ProviderOrderStatus, payload, "finish")

    async def _get(self, path: str, *, params: Optional[dict[str, str]] = None, auth: bool = False) -> Any:
        headers = {"Authorization": f"Bearer {self._api_key}"} if auth else None
        try:
            response = await self._client.get(path, params=params, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("Provider request %s failed: %s", path, exc)
            raise ProviderUnavailable(f"{path}: {exc.__class__.__name__}") from exc

        if response.is_error:
            logger.error("Provider request %s answered HTTP %s", path, response.status_code)
            raise ProviderUnavailable(f"{path}: HTTP {response.status_code}", status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            reason = response.text.strip()[:200] or None
            logger.error("Provider request %s returned a non-JSON body: %r", path, reason)
            raise ProviderDataInvalid(f"{path}: body is not JSON", reason=reason) from exc

    @staticmethod
    def _parse(model: type[BaseModel], payload: Any, what: str) -> Any:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            logger.error("Provider %s response failed validation: %s", what, exc)
            raise ProviderDataInvalid(f"{what}: unexpected response shape") from exc

    @staticmethod
    def _parse_adapter(adapter: TypeAdapter, payload: Any, what: str) -> Any:
        try:
            return adapter.validate_python(payload)
        except ValidationError as exc:
            logger.error("Provider %s response failed validation: %s", what, exc)
            raise ProviderDataInvalid(f"{what}: unexpected response shape") from exc
