# model/account_model.py
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, DateTime, Enum
from sqlalchemy.orm import relationship
from database import Base
import datetime, enum

class AccountTypeEnum(str, enum.Enum):
    CHECKING = "checking"
    SAVINGS = "savings"

class Account(Base):
    __tablename__ = "accounts"

    id               = Column(Integer, primary_key=True, index=True)
    user_id          = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    account_number   = Column(String(12), unique=True, index=True, nullable=False)
    account_type     = Column(
        Enum(AccountTypeEnum, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    account_name     = Column(String(255), nullable=False)
    # checking and savings keep their balances in distinct fields
    checking_balance = Column(Numeric(12, 2), nullable=False, default=0)
    savings_balance  = Column(Numeric(12, 2), nullable=False, default=0)
    account_status   = Column(String(32), nullable=False, default="active")
    interest_rate    = Column(Numeric(6, 4), nullable=True)
    created_at       = Column(DateTime, default=datetime.datetime.utcnow)

    user = relationship("User", back_populates="accounts")
