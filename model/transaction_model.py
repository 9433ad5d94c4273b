# model/transaction_model.py
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, DateTime, Enum
from database import Base
import datetime, enum

class TransactionTypeEnum(str, enum.Enum):
    PAYMENT = "payment"
    PURCHASE = "purchase"
    REFUND = "refund"

class CardTransaction(Base):
    """Append-only record of one movement of funds on a card."""
    __tablename__ = "card_transactions"

    id               = Column(Integer, primary_key=True, index=True)
    card_id          = Column(Integer, ForeignKey("cards.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id          = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    merchant_name    = Column(String(255), nullable=False)
    amount           = Column(Numeric(12, 2), nullable=False)
    transaction_type = Column(
        Enum(TransactionTypeEnum, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    status           = Column(String(16), nullable=False, default="completed")
    description      = Column(String(255), nullable=True)
    transaction_date = Column(DateTime, default=datetime.datetime.utcnow)
    posted_date      = Column(DateTime, default=datetime.datetime.utcnow)
