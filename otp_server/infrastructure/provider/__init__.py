"""Number-rental provider integration."""

from .client import FiveSimClient
from .exceptions import ProviderDataInvalid, ProviderError, ProviderUnavailable
from .schemas import PriceInfo, PriceTable, ProductInfo, ProductMap, ProviderOrder, ProviderOrderStatus, ProviderSms

__all__ = [
    "FiveSimClient",
    "PriceInfo",
    "PriceTable",
    "ProductInfo",
    "ProductMap",
    "ProviderDataInvalid",
    "ProviderError",
    "ProviderOrder",
    "ProviderOrderStatus",
    "ProviderSms",
    "ProviderUnavailable",
]
