# crud/deposit_crud.py

import datetime
from typing import Optional, List

from sqlalchemy.orm import Session

from app.errors import ValidationError, NotFoundError
from crud.account_crud import apply_credit, balance_field_for, get_account
from model.deposit_model import DepositRequest
from schemas.deposit_schemas import DepositCreate


def create_deposit_request(db: Session, user_id: int, deposit_in: DepositCreate) -> DepositRequest:
    deposit = DepositRequest(
        user_id=user_id,
        account_id=deposit_in.account_id,
        amount=deposit_in.amount,
        description=deposit_in.description or "Deposit request",
        payment_method=deposit_in.payment_method,
        status="pending",
    )
    db.add(deposit)
    db.commit()
    db.refresh(deposit)
    return deposit


def get_deposit(db: Session, deposit_id: int) -> Optional[DepositRequest]:
    return db.get(DepositRequest, deposit_id)


def get_user_deposits(db: Session, user_id: int) -> List[DepositRequest]:
    return (
        db.query(DepositRequest)
        .filter(DepositRequest.user_id == user_id)
        .order_by(DepositRequest.id.desc())
        .all()
    )


def get_deposits(db: Session, status: Optional[str] = "pending") -> List[DepositRequest]:
    query = db.query(DepositRequest)
    if status:
        query = query.filter(DepositRequest.status == status)
    return query.order_by(DepositRequest.id).all()


def decide_deposit(db: Session, deposit_id: int, approve: bool) -> DepositRequest:
    """Approval credits the target account in the same commit that closes the request."""
    deposit = get_deposit(db, deposit_id)
    if not deposit:
        raise NotFoundError("Deposit request not found")
    if deposit.status != "pending":
        raise ValidationError(f"Deposit request already {deposit.status}")

    account = None
    if approve:
        account = get_account(db, deposit.account_id)
        if not account:
            raise NotFoundError("Account not found")

    # only one decision can move the row out of pending, even from a stale session
    claimed = (
        db.query(DepositRequest)
        .filter(DepositRequest.id == deposit_id, DepositRequest.status == "pending")
        .update(
            {
                DepositRequest.status: "approved" if approve else "rejected",
                DepositRequest.decided_at: datetime.datetime.utcnow(),
            },
            synchronize_session=False,
        )
    )
    if not claimed:
        db.rollback()
        raise ValidationError("Deposit request already decided")
    if account is not None:
        apply_credit(db, account.id, balance_field_for(account.account_type), deposit.amount)
    db.commit()
    db.refresh(deposit)
    return deposit
