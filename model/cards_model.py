# model/cards_model.py

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric, Boolean, Text
from sqlalchemy.orm import relationship
from database import Base
import datetime

class Card(Base):
    __tablename__ = "cards"

    id                    = Column(Integer, primary_key=True, index=True)
    user_id               = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    card_number_encrypted = Column(Text, nullable=False)    # Fernet token
    cvv_encrypted         = Column(Text, nullable=False)
    card_number_masked    = Column(String(19), nullable=False)
    card_holder_name      = Column(String(255), nullable=False)
    expiry_date           = Column(String(5), nullable=False)  # MM/YY
    card_type             = Column(String(16), nullable=False, default="debit")
    card_status           = Column(String(16), nullable=False, default="active")
    card_color            = Column(String(32), nullable=True)
    card_brand            = Column(String(32), nullable=True)
    current_balance       = Column(Numeric(12, 2), nullable=False, default=0)
    credit_limit          = Column(Numeric(12, 2), nullable=True)
    available_credit      = Column(Numeric(12, 2), nullable=True)
    is_frozen             = Column(Boolean, nullable=False, default=False)
    freeze_reason         = Column(String(255), nullable=True)
    frozen_at             = Column(DateTime, nullable=True)
    issued_at             = Column(DateTime, default=datetime.datetime.utcnow)
    expires_at            = Column(DateTime, nullable=True)
    last_used_at          = Column(DateTime, nullable=True)
    created_at            = Column(DateTime, default=datetime.datetime.utcnow)

    user   = relationship("User", back_populates="cards")
    limits = relationship("CardLimits", back_populates="card", uselist=False, cascade="all, delete-orphan")


class CardLimits(Base):
    __tablename__ = "card_limits"

    id                                 = Column(Integer, primary_key=True, index=True)
    card_id                            = Column(Integer, ForeignKey("cards.id", ondelete="CASCADE"), unique=True, nullable=False)
    user_id                            = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    daily_purchase_limit               = Column(Numeric(12, 2), nullable=False, default=5000)
    daily_withdrawal_limit             = Column(Numeric(12, 2), nullable=False, default=1000)
    monthly_limit                      = Column(Numeric(12, 2), nullable=False, default=50000)
    daily_spent                        = Column(Numeric(12, 2), nullable=False, default=0)
    daily_withdrawn                    = Column(Numeric(12, 2), nullable=False, default=0)
    monthly_spent                      = Column(Numeric(12, 2), nullable=False, default=0)
    international_transactions_enabled = Column(Boolean, nullable=False, default=True)
    online_transactions_enabled        = Column(Boolean, nullable=False, default=True)
    contactless_enabled                = Column(Boolean, nullable=False, default=True)
    atm_withdrawals_enabled            = Column(Boolean, nullable=False, default=True)

    card = relationship("Card", back_populates="limits")


class CardFreezeHistory(Base):
    __tablename__ = "card_freeze_history"

    id           = Column(Integer, primary_key=True, index=True)
    card_id      = Column(Integer, ForeignKey("cards.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id      = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    action       = Column(String(16), nullable=False)   # freeze | unfreeze
    reason       = Column(String(255), nullable=True)
    freeze_type  = Column(String(32), nullable=False, default="user_requested")
    initiated_by = Column(String(32), nullable=False, default="user")
    created_at   = Column(DateTime, default=datetime.datetime.utcnow)
