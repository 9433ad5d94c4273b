# model/user_model.py
from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship
from database import Base
import datetime

class User(Base):
    __tablename__ = "users"

    id              = Column(Integer, primary_key=True, index=True)
    email           = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    full_name       = Column(String(255), nullable=False)
    account_number  = Column(String(12), unique=True, index=True, nullable=False)
    is_admin        = Column(Boolean, default=False, nullable=False)
    is_banned       = Column(Boolean, default=False, nullable=False)
    ban_reason      = Column(String(255), nullable=True)
    wire_transfers_blocked     = Column(Boolean, default=False, nullable=False)
    wire_transfer_block_reason = Column(String(255), nullable=True)
    created_at      = Column(DateTime, default=datetime.datetime.utcnow)

    accounts = relationship("Account", back_populates="user", cascade="all, delete-orphan")
    cards    = relationship("Card", back_populates="user", cascade="all, delete-orphan")
