"""Number rental endpoints: catalog, purchase, SMS polling, cancel and finish."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from otp_server.core.config import get_settings
from otp_server.core.security import get_current_account
from otp_server.infrastructure.provider import ProviderError
from otp_server.interfaces.http.deps import get_catalog_service, get_db_session, get_purchase_service
from otp_server.modules.accounts import Account as AccountDomain
from otp_server.modules.catalog import CatalogService
from otp_server.modules.purchases import FailureKind, LifecycleResult, PurchaseService
from otp_server.schemas import (
    CheckSmsResponse,
    PhoneTransactionResponse,
    PriceResponse,
    PricesRequest,
    ProductResponse,
    ProductsRequest,
    PurchaseRequest,
    TransactionActionResponse,
    TransactionHistoryResponse,
)

router = APIRouter()

FAILURE_STATUS = {
    FailureKind.INSUFFICIENT_FUNDS: status.HTTP_402_PAYMENT_REQUIRED,
    FailureKind.PROVIDER_UNAVAILABLE: status.HTTP_502_BAD_GATEWAY,
    FailureKind.PROVIDER_DATA_INVALID: status.HTTP_502_BAD_GATEWAY,
    FailureKind.PROVIDER_REFUSED: status.HTTP_409_CONFLICT,
    FailureKind.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    FailureKind.DUPLICATE_PROVIDER_ID: status.HTTP_500_INTERNAL_SERVER_ERROR,
    FailureKind.NOT_AVAILABLE: status.HTTP_403_FORBIDDEN,
}


def _raise_for_failure(result: LifecycleResult) -> None:
    status_code = FAILURE_STATUS.get(result.error, status.HTTP_400_BAD_REQUEST)
    raise HTTPException(status_code=status_code, detail=result.message)


@router.get("/countries", response_model=dict[str, str], summary="Countries numbers can be rented in")
async def list_countries(
    _: AccountDomain = Depends(get_current_account),
    catalog: CatalogService = Depends(get_catalog_service),
) -> dict[str, str]:
    return await catalog.list_countries()


@router.post("/products", response_model=dict[str, ProductResponse], summary="Products offered for a country")
async def list_products(
    payload: ProductsRequest,
    _: AccountDomain = Depends(get_current_account),
    catalog: CatalogService = Depends(get_catalog_service),
) -> dict[str, ProductResponse]:
    try:
        products = await catalog.list_products(payload.country, payload.operator)
    except ProviderError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Could not load products.") from exc
    return {
        name: ProductResponse(category=info.category, qty=info.qty, price=info.price)
        for name, info in products.items()
    }


@router.post(
    "/prices",
    response_model=dict[str, dict[str, dict[str, PriceResponse]]],
    summary="Operator prices for a country and product",
)
async def list_prices(
    payload: PricesRequest,
    _: AccountDomain = Depends(get_current_account),
    catalog: CatalogService = Depends(get_catalog_service),
) -> dict[str, dict[str, dict[str, PriceResponse]]]:
    try:
        table = await catalog.list_prices(payload.country, payload.product)
    except ProviderError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Could not load prices.") from exc
    return {
        country: {
            product: {
                operator: PriceResponse(cost=price.cost, count=price.count, rate=price.rate)
                for operator, price in operators.items()
            }
            for product, operators in products.items()
        }
        for country, products in table.items()
    }


@router.post(
    "/purchase",
    response_model=PhoneTransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Rent a number and pay for it",
)
async def purchase_number(
    payload: PurchaseRequest,
    account: AccountDomain = Depends(get_current_account),
    purchases: PurchaseService = Depends(get_purchase_service),
    db: AsyncSession = Depends(get_db_session),
) -> PhoneTransactionResponse:
    result = await purchases.purchase(account, payload.country, payload.operator, payload.product)
    await db.commit()
    if not result.ok:
        _raise_for_failure(result)
    return PhoneTransactionResponse.from_domain(result.transaction)


@router.get("/verify/{transaction_id}", response_model=PhoneTransactionResponse, summary="Transaction detail")
async def verify_transaction(
    transaction_id: int,
    account: AccountDomain = Depends(get_current_account),
    purchases: PurchaseService = Depends(get_purchase_service),
    db: AsyncSession = Depends(get_db_session),
) -> PhoneTransactionResponse:
    result = await purchases.verify(account, transaction_id)
    await db.commit()
    if result.transaction is None:
        _raise_for_failure(result)
    return PhoneTransactionResponse.from_domain(result.transaction)


@router.post("/check-sms/{transaction_id}", response_model=CheckSmsResponse, summary="Refresh SMS status")
async def check_sms(
    transaction_id: int,
    account: AccountDomain = Depends(get_current_account),
    purchases: PurchaseService = Depends(get_purchase_service),
    db: AsyncSession = Depends(get_db_session),
) -> CheckSmsResponse:
    result = await purchases.check_sms(account, transaction_id)
    await db.commit()
    if result.transaction is None:
        _raise_for_failure(result)
    return CheckSmsResponse(
        transaction=PhoneTransactionResponse.from_domain(result.transaction),
        has_sms=result.has_sms,
        refreshed=result.ok,
        message=result.message,
        poll_interval=get_settings().polling.interval_seconds,
    )


@router.post("/cancel/{transaction_id}", response_model=TransactionActionResponse, summary="Cancel and refund")
async def cancel_transaction(
    transaction_id: int,
    account: AccountDomain = Depends(get_current_account),
    purchases: PurchaseService = Depends(get_purchase_service),
    db: AsyncSession = Depends(get_db_session),
) -> TransactionActionResponse:
    result = await purchases.cancel(account, transaction_id)
    await db.commit()
    if not result.ok:
        _raise_for_failure(result)
    return TransactionActionResponse(
        message="Transaction successfully canceled and refunded.",
        transaction=PhoneTransactionResponse.from_domain(result.transaction),
    )


@router.post("/finish/{transaction_id}", response_model=TransactionActionResponse, summary="Close a rental")
async def finish_transaction(
    transaction_id: int,
    account: AccountDomain = Depends(get_current_account),
    purchases: PurchaseService = Depends(get_purchase_service),
    db: AsyncSession = Depends(get_db_session),
) -> TransactionActionResponse:
    result = await purchases.finish(account, transaction_id)
    await db.commit()
    if not result.ok:
        _raise_for_failure(result)
    return TransactionActionResponse(
        message="Transaction successfully finished.",
        transaction=PhoneTransactionResponse.from_domain(result.transaction),
    )


@router.get("/history", response_model=TransactionHistoryResponse, summary="Own transactions, newest first")
async def transaction_history(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    account: AccountDomain = Depends(get_current_account),
    purchases: PurchaseService = Depends(get_purchase_service),
) -> TransactionHistoryResponse:
    page = await purchases.history(account, limit, offset)
    return TransactionHistoryResponse(
        items=[PhoneTransactionResponse.from_domain(item) for item in page.items],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


@router.get("/active", response_model=list[PhoneTransactionResponse], summary="Own non-terminal transactions")
async def active_transactions(
    account: AccountDomain = Depends(get_current_account),
    purchases: PurchaseService = Depends(get_purchase_service),
) -> list[PhoneTransactionResponse]:
    return [PhoneTransactionResponse.from_domain(item) for item in await purchases.active(account)]
