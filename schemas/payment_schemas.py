# schemas/payment_schemas.py

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Literal

from model.transaction_model import TransactionTypeEnum
from schemas.account_schemas import AccountOut

class CardCreate(BaseModel):
    card_holder_name: str
    card_color: Optional[str] = "gradient-blue"

class CardOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    card_number_masked: str
    card_holder_name: str
    expiry_date: str
    card_type: str
    card_status: str
    card_color: Optional[str] = None
    card_brand: Optional[str] = None
    current_balance: Decimal
    credit_limit: Optional[Decimal] = None
    available_credit: Optional[Decimal] = None
    is_frozen: bool
    freeze_reason: Optional[str] = None
    frozen_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    last_used_at: Optional[datetime] = None
    created_at: datetime

class CardDetailsOut(BaseModel):
    id: int
    card_number: str
    cvv: str
    expiry_date: str
    card_holder_name: str

class FreezeIn(BaseModel):
    reason: Optional[str] = None

class FreezeHistoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    action: Literal["freeze", "unfreeze"]
    reason: Optional[str] = None
    freeze_type: str
    initiated_by: str
    created_at: datetime

class CardLimitsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    card_id: int
    daily_purchase_limit: Decimal
    daily_withdrawal_limit: Decimal
    monthly_limit: Decimal
    daily_spent: Decimal
    daily_withdrawn: Decimal
    monthly_spent: Decimal
    international_transactions_enabled: bool
    online_transactions_enabled: bool
    contactless_enabled: bool
    atm_withdrawals_enabled: bool

class CardLimitsUpdate(BaseModel):
    daily_purchase_limit: Optional[Decimal] = Field(default=None, ge=0)
    daily_withdrawal_limit: Optional[Decimal] = Field(default=None, ge=0)
    monthly_limit: Optional[Decimal] = Field(default=None, ge=0)
    international_transactions_enabled: Optional[bool] = None
    online_transactions_enabled: Optional[bool] = None
    contactless_enabled: Optional[bool] = None
    atm_withdrawals_enabled: Optional[bool] = None

class CardTransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    card_id: int
    merchant_name: str
    amount: Decimal
    transaction_type: TransactionTypeEnum
    status: str
    description: Optional[str] = None
    transaction_date: datetime

class FundCardIn(BaseModel):
    account_id: int
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)

class FundCardOut(BaseModel):
    intent_id: int
    amount: Decimal
    account_balance: Decimal
    card_balance: Decimal
    audit_recorded: bool
    accounts: List[AccountOut]
    cards: List[CardOut]

class RecoveryOut(BaseModel):
    failed: int = 0
    reversed: int = 0
    completed: int = 0
    errors: int = 0
