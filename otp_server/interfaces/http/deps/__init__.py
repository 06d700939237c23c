"""Reusable FastAPI dependencies."""

from .account import get_account_service
from .database import get_db_session
from .provider import get_catalog_service, get_provider_client, get_purchase_service, get_wallet_service

__all__ = [
    "get_account_service",
    "get_catalog_service",
    "get_db_session",
    "get_provider_client",
    "get_purchase_service",
    "get_wallet_service",
]
