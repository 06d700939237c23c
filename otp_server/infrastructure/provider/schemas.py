"""Validated shapes of the provider's JSON answers."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


def _decimal_from_float(value: Any) -> Any:
    # go through str so 0.1 stays 0.1
    if isinstance(value, float):
        return str(value)
    return value


class ProviderSms(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str
    created_at: datetime
    sender: Optional[str] = None
    code: Optional[str] = None


class ProviderOrder(BaseModel):
    """An activation order as returned by buy and check."""

    model_config = ConfigDict(extra="ignore")

    id: str
    phone: str
    operator: str
    product: str
    price: Decimal
    status: str
    expires: datetime
    country: str
    created_at: Optional[datetime] = None
    sms: list[ProviderSms] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, value: Any) -> Any:
        return _decimal_from_float(value)

    @field_validator("sms", mode="before")
    @classmethod
    def _sms_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def last_sms(self) -> Optional[ProviderSms]:
        return self.sms[-1] if self.sms else None


class ProviderOrderStatus(BaseModel):
    """Answer of cancel/finish; only the status is acted upon."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    status: str

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


class ProductInfo(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    category: str = Field(alias="Category")
    qty: int = Field(alias="Qty")
    price: Decimal = Field(alias="Price")

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, value: Any) -> Any:
        return _decimal_from_float(value)


class PriceInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    cost: Decimal
    count: int
    rate: Optional[float] = None

    @field_validator("cost", mode="before")
    @classmethod
    def _cost(cls, value: Any) -> Any:
        return _decimal_from_float(value)


ProductMap = dict[str, ProductInfo]
PriceTable = dict[str, dict[str, dict[str, PriceInfo]]]

products_adapter = TypeAdapter(ProductMap)
prices_adapter = TypeAdapter(PriceTable)
