# crud/payment_crud.py

import datetime
from decimal import Decimal
from typing import Optional, List

from sqlalchemy.orm import Session

from crud.transfer_crud import stage_intent_status
from model.transaction_model import CardTransaction, TransactionTypeEnum
from model.transfer_intent_model import INTENT_COMPLETED


def create_card_transaction(
    db: Session,
    card_id: int,
    user_id: int,
    merchant_name: str,
    amount: Decimal,
    transaction_type: TransactionTypeEnum,
    status: str = "completed",
    description: Optional[str] = None,
    intent_id: Optional[int] = None,
) -> CardTransaction:
    now = datetime.datetime.utcnow()
    record = CardTransaction(
        card_id=card_id,
        user_id=user_id,
        merchant_name=merchant_name,
        amount=amount,
        transaction_type=transaction_type,
        status=status,
        description=description,
        transaction_date=now,
        posted_date=now,
    )
    db.add(record)
    stage_intent_status(db, intent_id, INTENT_COMPLETED)
    db.commit()
    db.refresh(record)
    return record


def get_card_transactions(db: Session, card_id: int, limit: int = 10) -> List[CardTransaction]:
    return (
        db.query(CardTransaction)
        .filter(CardTransaction.card_id == card_id)
        .order_by(CardTransaction.transaction_date.desc(), CardTransaction.id.desc())
        .limit(limit)
        .all()
    )


def get_user_card_transactions(db: Session, user_id: int, limit: int = 50) -> List[CardTransaction]:
    return (
        db.query(CardTransaction)
        .filter(CardTransaction.user_id == user_id)
        .order_by(CardTransaction.transaction_date.desc(), CardTransaction.id.desc())
        .limit(limit)
        .all()
    )
