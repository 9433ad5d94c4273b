# schemas/account_schemas.py

from pydantic import BaseModel, ConfigDict
from datetime import datetime
from decimal import Decimal
from typing import Optional

from model.account_model import AccountTypeEnum

class AccountOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    account_number: str
    account_type: AccountTypeEnum
    account_name: str
    checking_balance: Decimal
    savings_balance: Decimal
    account_status: str
    interest_rate: Optional[Decimal] = None
    created_at: datetime
