# model/deposit_model.py
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, DateTime
from database import Base
import datetime

class DepositRequest(Base):
    __tablename__ = "deposit_requests"

    id             = Column(Integer, primary_key=True, index=True)
    user_id        = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    account_id     = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)
    amount         = Column(Numeric(12, 2), nullable=False)
    description    = Column(String(255), nullable=False, default="Deposit request")
    payment_method = Column(String(32), nullable=False)
    status         = Column(String(16), nullable=False, default="pending")  # pending | approved | rejected
    created_at     = Column(DateTime, default=datetime.datetime.utcnow)
    decided_at     = Column(DateTime, nullable=True)
