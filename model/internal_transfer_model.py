# model/internal_transfer_model.py
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, DateTime
from database import Base
import datetime

class InternalTransfer(Base):
    __tablename__ = "internal_transfers"

    id                = Column(Integer, primary_key=True, index=True)
    user_id           = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    from_account_id   = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)
    to_account_id     = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)
    from_account_type = Column(String(16), nullable=False)
    to_account_type   = Column(String(16), nullable=False)
    amount            = Column(Numeric(12, 2), nullable=False)
    reference         = Column(String(32), nullable=False, index=True)
    description       = Column(String(255), nullable=False)
    status            = Column(String(16), nullable=False, default="completed")
    created_at        = Column(DateTime, default=datetime.datetime.utcnow)
