# model/wire_transfer_model.py
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, DateTime
from database import Base
import datetime

class WireTransfer(Base):
    __tablename__ = "wire_transfers"

    id                       = Column(Integer, primary_key=True, index=True)
    user_id                  = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    account_id               = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)
    from_account_number      = Column(String(12), nullable=False)
    amount                   = Column(Numeric(12, 2), nullable=False)
    fee                      = Column(Numeric(12, 2), nullable=False)
    total_amount             = Column(Numeric(12, 2), nullable=False)
    recipient_name           = Column(String(255), nullable=False)
    recipient_bank_name      = Column(String(255), nullable=False)
    recipient_routing_number = Column(String(9), nullable=False)
    recipient_account_number = Column(String(34), nullable=False)
    recipient_bank_address   = Column(String(255), nullable=False)
    recipient_account_type   = Column(String(16), nullable=False, default="checking")
    swift_code               = Column(String(11), nullable=True)
    reference_message        = Column(String(255), nullable=True)
    confirmation_number      = Column(String(16), unique=True, index=True, nullable=False)
    status                   = Column(String(16), nullable=False, default="pending")  # pending | completed | cancelled
    created_at               = Column(DateTime, default=datetime.datetime.utcnow)
    decided_at               = Column(DateTime, nullable=True)
