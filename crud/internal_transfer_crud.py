# crud/internal_transfer_crud.py

import time
from decimal import Decimal
from typing import Optional, List

from sqlalchemy.orm import Session

from crud.account_crud import apply_credit, apply_debit, balance_field_for
from model.account_model import Account
from model.internal_transfer_model import InternalTransfer


def _type_of(account: Account) -> str:
    return getattr(account.account_type, "value", account.account_type)


def create_internal_transfer(
    db: Session,
    user_id: int,
    source: Account,
    target: Account,
    amount: Decimal,
) -> Optional[InternalTransfer]:
    """
    Moves `amount` between two accounts of the same owner and records the transfer,
    all in one commit. Returns None when the source balance no longer covers `amount`.
    """
    source_type, target_type = _type_of(source), _type_of(target)
    description = f"Internal transfer from {source.account_name} to {target.account_name}"

    if not apply_debit(db, source.id, balance_field_for(source_type), amount):
        db.rollback()
        return None
    apply_credit(db, target.id, balance_field_for(target_type), amount)

    transfer = InternalTransfer(
        user_id=user_id,
        from_account_id=source.id,
        to_account_id=target.id,
        from_account_type=source_type,
        to_account_type=target_type,
        amount=amount,
        reference=f"TXN{int(time.time() * 1000)}",
        description=description,
        status="completed",
    )
    db.add(transfer)
    db.commit()
    db.refresh(transfer)
    return transfer


def get_user_internal_transfers(db: Session, user_id: int, limit: int = 50) -> List[InternalTransfer]:
    return (
        db.query(InternalTransfer)
        .filter(InternalTransfer.user_id == user_id)
        .order_by(InternalTransfer.id.desc())
        .limit(limit)
        .all()
    )
