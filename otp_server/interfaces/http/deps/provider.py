"""Provider-backed service providers."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from otp_server.core.container import get_container
from otp_server.infrastructure.provider import FiveSimClient
from otp_server.modules.catalog import CatalogService
from otp_server.modules.purchases import PurchaseService
from otp_server.modules.wallets import WalletService

from .database import get_db_session


def get_provider_client() -> FiveSimClient:
    return get_container().provider


def get_catalog_service(provider: FiveSimClient = Depends(get_provider_client)) -> CatalogService:
    return CatalogService(provider)


def get_purchase_service(
    db: AsyncSession = Depends(get_db_session),
    provider: FiveSimClient = Depends(get_provider_client),
) -> PurchaseService:
    return PurchaseService.with_session(db, provider)


def get_wallet_service(db: AsyncSession = Depends(get_db_session)) -> WalletService:
    return WalletService.with_session(db)


__all__ = [
    "get_catalog_service",
    "get_provider_client",
    "get_purchase_service",
    "get_wallet_service",
]
