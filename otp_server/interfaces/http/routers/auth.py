"""Registration and login for web clients."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from otp_server.core.security import create_access_token, get_current_account
from otp_server.interfaces.http.deps import get_account_service, get_db_session
from otp_server.modules.accounts import (
    Account as AccountDomain,
    AccountAlreadyExistsError,
    AccountCreateInput,
    AccountService,
)
from otp_server.modules.wallets import WalletService
from otp_server.schemas import AccountCreate, AccountLoginResponse, AccountResponse, LoginRequest

router = APIRouter()


@router.post(
    "/register",
    response_model=AccountLoginResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a customer account",
)
async def register(
    payload: AccountCreate,
    account_service: AccountService = Depends(get_account_service),
    db: AsyncSession = Depends(get_db_session),
) -> AccountLoginResponse:
    try:
        account = await account_service.create_account(
            AccountCreateInput(
                username=payload.username,
                password=payload.password,
                role="user",
                email=payload.email,
            )
        )
    except AccountAlreadyExistsError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already taken") from exc

    await WalletService.with_session(db).ensure_wallet(account.id)
    await db.commit()

    access_token = create_access_token(account.id, account.username, account.role)
    return AccountLoginResponse(
        access_token=access_token,
        account_id=account.id,
        username=account.username,
        role=account.role,
    )


@router.post("/login", response_model=AccountLoginResponse, summary="Log in and receive a bearer token")
async def login(
    payload: LoginRequest,
    account_service: AccountService = Depends(get_account_service),
    db: AsyncSession = Depends(get_db_session),
) -> AccountLoginResponse:
    account = await account_service.authenticate(payload.username, payload.password)
    if not account:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")

    await account_service.set_last_login(account.id)
    await db.commit()

    access_token = create_access_token(account.id, account.username, account.role)
    return AccountLoginResponse(
        access_token=access_token,
        account_id=account.id,
        username=account.username,
        role=account.role,
    )


@router.get("/me", response_model=AccountResponse)
async def current_account(account: AccountDomain = Depends(get_current_account)):
    return account
