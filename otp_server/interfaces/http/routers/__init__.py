from fastapi import APIRouter

from . import admin, auth, otp, wallet


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(auth.router, prefix="/auth", tags=["auth"])
    router.include_router(otp.router, prefix="/otp", tags=["otp"])
    router.include_router(wallet.router, prefix="/wallet", tags=["wallet"])
    router.include_router(admin.router, prefix="/admin", tags=["admin"])
    return router


__all__ = [
    "create_api_router",
]
