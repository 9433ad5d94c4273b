# model/transfer_intent_model.py
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, DateTime
from database import Base
import datetime

# pending -> debited -> credited -> completed, or failed / reversed
INTENT_PENDING   = "pending"
INTENT_DEBITED   = "debited"
INTENT_CREDITED  = "credited"
INTENT_COMPLETED = "completed"
INTENT_FAILED    = "failed"
INTENT_REVERSED  = "reversed"

class TransferIntent(Base):
    __tablename__ = "transfer_intents"

    id            = Column(Integer, primary_key=True, index=True)
    user_id       = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    account_id    = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)
    card_id       = Column(Integer, ForeignKey("cards.id", ondelete="CASCADE"), nullable=False)
    balance_field = Column(String(32), nullable=False)
    amount        = Column(Numeric(12, 2), nullable=False)
    status        = Column(String(16), nullable=False, default=INTENT_PENDING, index=True)
    error         = Column(String(255), nullable=True)
    created_at    = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at    = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)
