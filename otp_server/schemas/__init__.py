"""Pydantic schemas used across the project."""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)


class TokenData(BaseModel):
    account_id: str
    username: str
    role: str


class AccountLoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    account_id: str
    username: str
    role: str


class AccountCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)
    email: Optional[str] = None


class AccountResponse(BaseModel):
    id: str
    username: str
    email: Optional[str] = None
    role: str
    is_active: bool
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProductsRequest(BaseModel):
    country: str = Field(..., min_length=1)
    operator: str = "any"


class PricesRequest(BaseModel):
    country: str = Field(..., min_length=1)
    product: str = Field(..., min_length=1)


class PurchaseRequest(BaseModel):
    country: str = Field(..., min_length=1)
    operator: str = Field(..., min_length=1)
    product: str = Field(..., min_length=1)


class ProductResponse(BaseModel):
    category: str
    qty: int
    price: Decimal


class PriceResponse(BaseModel):
    cost: Decimal
    count: int
    rate: Optional[float] = None


class PhoneTransactionResponse(BaseModel):
    id: int
    provider_transaction_id: str
    phone_number: str
    country: str
    operator: str
    service: str
    price: Decimal
    status: str
    expires_at: datetime
    sms_text: Optional[str] = None
    sms_received_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_terminal: bool
    expired: bool
    seconds_left: int

    @classmethod
    def from_domain(cls, transaction, now: Optional[datetime] = None) -> "PhoneTransactionResponse":
        now = now or datetime.now(timezone.utc)
        return cls(
            id=transaction.id,
            provider_transaction_id=transaction.provider_transaction_id,
            phone_number=transaction.phone_number,
            country=transaction.country,
            operator=transaction.operator,
            service=transaction.service,
            price=transaction.price,
            status=transaction.status,
            expires_at=transaction.expires_at,
            sms_text=transaction.sms_text,
            sms_received_at=transaction.sms_received_at,
            created_at=transaction.created_at,
            updated_at=transaction.updated_at,
            is_terminal=transaction.is_terminal,
            expired=transaction.is_expired(now),
            seconds_left=transaction.seconds_left(now),
        )


class CheckSmsResponse(BaseModel):
    transaction: PhoneTransactionResponse
    has_sms: bool
    refreshed: bool = True
    message: Optional[str] = None
    poll_interval: int = 5


class TransactionActionResponse(BaseModel):
    success: bool = True
    message: str
    transaction: PhoneTransactionResponse


class TransactionHistoryResponse(BaseModel):
    items: list[PhoneTransactionResponse] = Field(default_factory=list)
    total: int
    limit: int
    offset: int


class WalletSnapshotResponse(BaseModel):
    balance: Decimal
    currency: str


class WalletEntryResponse(BaseModel):
    id: str
    amount: Decimal
    currency: str
    type: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    phone_transaction_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class WalletEntryListResponse(BaseModel):
    entries: list[WalletEntryResponse] = Field(default_factory=list)


class WalletTopupRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    description: Optional[str] = Field(None, max_length=255)
