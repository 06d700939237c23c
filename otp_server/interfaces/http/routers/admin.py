"""Administrative endpoints: account listing and manual wallet top-ups."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from otp_server.core.security import get_current_admin
from otp_server.interfaces.http.deps import get_account_service, get_db_session, get_wallet_service
from otp_server.modules.accounts import Account as AccountDomain, AccountNotFoundError, AccountService
from otp_server.modules.wallets import WalletService
from otp_server.schemas import AccountResponse, WalletSnapshotResponse, WalletTopupRequest

router = APIRouter()


async def _require_account(account_service: AccountService, account_id: str) -> AccountDomain:
    try:
        return await account_service.require(account_id)
    except AccountNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Account not found") from exc


@router.get("/accounts", response_model=List[AccountResponse])
async def list_accounts(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    _: AccountDomain = Depends(get_current_admin),
    account_service: AccountService = Depends(get_account_service),
):
    return list(await account_service.list_accounts(limit, offset))


@router.get("/accounts/{account_id}/wallet", response_model=WalletSnapshotResponse)
async def get_account_wallet(
    account_id: str,
    _: AccountDomain = Depends(get_current_admin),
    account_service: AccountService = Depends(get_account_service),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> WalletSnapshotResponse:
    await _require_account(account_service, account_id)
    snapshot = await wallet_service.get_snapshot(account_id)
    return WalletSnapshotResponse(balance=snapshot.balance, currency=snapshot.currency)


@router.post("/accounts/{account_id}/wallet/topup", response_model=WalletSnapshotResponse)
async def topup_account_wallet(
    account_id: str,
    payload: WalletTopupRequest,
    admin: AccountDomain = Depends(get_current_admin),
    account_service: AccountService = Depends(get_account_service),
    wallet_service: WalletService = Depends(get_wallet_service),
    db: AsyncSession = Depends(get_db_session),
) -> WalletSnapshotResponse:
    account = await _require_account(account_service, account_id)
    description = payload.description or f"Top-up by {admin.username}"
    snapshot = await wallet_service.topup(account.id, payload.amount, description)
    await db.commit()
    return WalletSnapshotResponse(balance=snapshot.balance, currency=snapshot.currency)
