# schemas/transfer_schemas.py

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Literal

from schemas.account_schemas import AccountOut

# ─── Internal transfers ──────────────────────────────────────────────────────────

class InternalTransferIn(BaseModel):
    from_account_id: int
    to_account_id: int
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)

class InternalTransferOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    from_account_id: int
    to_account_id: int
    from_account_type: str
    to_account_type: str
    amount: Decimal
    reference: str
    description: str
    status: str
    created_at: datetime

class InternalTransferResult(BaseModel):
    transfer: InternalTransferOut
    accounts: List[AccountOut]

# ─── Wire transfers ──────────────────────────────────────────────────────────────

class WireTransferCreate(BaseModel):
    account_id: int
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    recipient_name: str = Field(min_length=1, max_length=255)
    recipient_bank_name: str = Field(min_length=2, max_length=255)
    recipient_routing_number: str
    recipient_account_number: str = Field(min_length=4, max_length=34)
    recipient_bank_address: str = Field(min_length=1, max_length=255)
    recipient_account_type: Literal["checking", "savings"] = "checking"
    swift_code: Optional[str] = Field(default=None, max_length=11)
    reference_message: Optional[str] = Field(default=None, max_length=255)

class WireTransferOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    account_id: int
    from_account_number: str
    amount: Decimal
    fee: Decimal
    total_amount: Decimal
    recipient_name: str
    recipient_bank_name: str
    recipient_routing_number: str
    recipient_account_number: str
    recipient_bank_address: str
    recipient_account_type: str
    swift_code: Optional[str] = None
    reference_message: Optional[str] = None
    confirmation_number: str
    status: Literal["pending", "completed", "cancelled"]
    created_at: datetime
    decided_at: Optional[datetime] = None

class WireBlockIn(BaseModel):
    blocked: bool
    reason: Optional[str] = None
