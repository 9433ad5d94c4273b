# crud/transfer_crud.py

import datetime
from decimal import Decimal
from typing import Optional, List

from sqlalchemy.orm import Session

from model.transfer_intent_model import (
    TransferIntent,
    INTENT_PENDING,
    INTENT_DEBITED,
    INTENT_CREDITED,
)

UNFINISHED_STATUSES = (INTENT_PENDING, INTENT_DEBITED, INTENT_CREDITED)


def open_intent(
    db: Session,
    user_id: int,
    account_id: int,
    card_id: int,
    balance_field: str,
    amount: Decimal,
) -> TransferIntent:
    intent = TransferIntent(
        user_id=user_id,
        account_id=account_id,
        card_id=card_id,
        balance_field=balance_field,
        amount=amount,
        status=INTENT_PENDING,
    )
    db.add(intent)
    db.commit()
    db.refresh(intent)
    return intent


def get_intent(db: Session, intent_id: int) -> Optional[TransferIntent]:
    return db.get(TransferIntent, intent_id)


def stage_intent_status(db: Session, intent_id: Optional[int], status: str, error: Optional[str] = None) -> None:
    """Sets the intent status inside the caller's transaction; the caller commits."""
    if intent_id is None:
        return
    intent = db.get(TransferIntent, intent_id)
    if intent is None:
        return
    intent.status = status
    intent.updated_at = datetime.datetime.utcnow()
    if error is not None:
        intent.error = error[:255]


def mark_intent(db: Session, intent_id: int, status: str, error: Optional[str] = None) -> None:
    stage_intent_status(db, intent_id, status, error)
    db.commit()


def get_stale_intents(db: Session, cutoff: datetime.datetime) -> List[TransferIntent]:
    return (
        db.query(TransferIntent)
        .filter(TransferIntent.status.in_(UNFINISHED_STATUSES))
        .filter(TransferIntent.created_at < cutoff)
        .order_by(TransferIntent.id)
        .all()
    )
