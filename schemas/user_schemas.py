# schemas/user_schemas.py

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from datetime import datetime
from typing import Optional

class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    full_name: str = Field(min_length=1, max_length=255)

class AdminUserCreate(UserCreate):
    is_admin: bool = False

class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    full_name: str
    account_number: str
    is_admin: bool
    is_banned: bool
    ban_reason: Optional[str] = None
    wire_transfers_blocked: bool = False
    wire_transfer_block_reason: Optional[str] = None
    created_at: datetime

class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime

class BanIn(BaseModel):
    reason: Optional[str] = None
