"""Balance and journal of the current account."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from otp_server.core.security import get_current_account
from otp_server.interfaces.http.deps import get_db_session, get_wallet_service
from otp_server.modules.accounts import Account as AccountDomain
from otp_server.modules.wallets import WalletService
from otp_server.schemas import WalletEntryListResponse, WalletEntryResponse, WalletSnapshotResponse

router = APIRouter()


@router.get("", response_model=WalletSnapshotResponse, summary="Current balance")
async def get_wallet_snapshot(
    account: AccountDomain = Depends(get_current_account),
    wallet_service: WalletService = Depends(get_wallet_service),
    db: AsyncSession = Depends(get_db_session),
) -> WalletSnapshotResponse:
    snapshot = await wallet_service.ensure_wallet(account.id)
    await db.commit()
    return WalletSnapshotResponse(balance=snapshot.balance, currency=snapshot.currency)


@router.get("/entries", response_model=WalletEntryListResponse, summary="Purchases, refunds and top-ups")
async def list_wallet_entries(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    account: AccountDomain = Depends(get_current_account),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> WalletEntryListResponse:
    entries = await wallet_service.list_entries(account.id, limit, offset)
    return WalletEntryListResponse(entries=[WalletEntryResponse.model_validate(entry) for entry in entries])
