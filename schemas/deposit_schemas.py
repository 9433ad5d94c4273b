# schemas/deposit_schemas.py

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional, Literal

class DepositCreate(BaseModel):
    account_id: int
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    description: Optional[str] = None
    payment_method: str = "bank_transfer"

class DepositOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    account_id: int
    amount: Decimal
    description: str
    payment_method: str
    status: Literal["pending", "approved", "rejected"]
    created_at: datetime
    decided_at: Optional[datetime] = None
