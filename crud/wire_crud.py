# crud/wire_crud.py

import datetime
import re
import secrets
import string
import time
from decimal import Decimal
from typing import Optional, List

from sqlalchemy.orm import Session

from app.errors import ValidationError, NotFoundError, PermissionDeniedError, InsufficientBalanceError
from crud.account_crud import apply_debit, balance_field_for, current_balance, get_account
from crud.card_crud import format_currency
from model.account_model import Account
from model.user_model import User
from model.wire_transfer_model import WireTransfer
from schemas.transfer_schemas import WireTransferCreate
from settings import WIRE_TRANSFER_FEE

FEE = Decimal(WIRE_TRANSFER_FEE)


def clean_routing_number(routing: str) -> str:
    """Strips spaces/dashes and checks the 9-digit ABA checksum."""
    clean = re.sub(r"[\s-]", "", routing or "")
    if not re.fullmatch(r"\d{9}", clean):
        raise ValidationError("Routing number must be exactly 9 digits")
    d = [int(c) for c in clean]
    checksum = 3 * (d[0] + d[3] + d[6]) + 7 * (d[1] + d[4] + d[7]) + (d[2] + d[5] + d[8])
    if checksum % 10:
        raise ValidationError("Invalid routing number")
    return clean


def generate_confirmation_number() -> str:
    suffix = "".join(secrets.choice(string.ascii_uppercase + string.digits) for _ in range(4))
    return f"WT{str(int(time.time() * 1000))[-8:]}{suffix}"


def create_wire_transfer(db: Session, user: User, account: Account, wire_in: WireTransferCreate) -> WireTransfer:
    """
    Files a pending wire. Nothing is held at this point; the amount plus fee is
    taken from the account when an admin approves it.
    """
    if user.wire_transfers_blocked:
        reason = user.wire_transfer_block_reason
        raise PermissionDeniedError(
            f"Wire transfers are blocked for this account: {reason}" if reason
            else "Wire transfers are blocked for this account"
        )
    routing = clean_routing_number(wire_in.recipient_routing_number)

    total = wire_in.amount + FEE
    available = current_balance(account)
    if available < total:
        raise InsufficientBalanceError(
            f"Insufficient balance for wire of {format_currency(wire_in.amount)} "
            f"plus {format_currency(FEE)} fee. Available: {format_currency(available)}"
        )

    wire = WireTransfer(
        user_id=user.id,
        account_id=account.id,
        from_account_number=account.account_number,
        amount=wire_in.amount,
        fee=FEE,
        total_amount=total,
        recipient_name=wire_in.recipient_name.strip(),
        recipient_bank_name=wire_in.recipient_bank_name.strip(),
        recipient_routing_number=routing,
        recipient_account_number=wire_in.recipient_account_number.strip(),
        recipient_bank_address=wire_in.recipient_bank_address.strip(),
        recipient_account_type=wire_in.recipient_account_type,
        swift_code=(wire_in.swift_code or "").strip().upper() or None,
        reference_message=wire_in.reference_message,
        confirmation_number=generate_confirmation_number(),
        status="pending",
    )
    db.add(wire)
    db.commit()
    db.refresh(wire)
    return wire


def get_wire_transfer(db: Session, wire_id: int) -> Optional[WireTransfer]:
    return db.get(WireTransfer, wire_id)


def get_user_wire_transfers(db: Session, user_id: int) -> List[WireTransfer]:
    return (
        db.query(WireTransfer)
        .filter(WireTransfer.user_id == user_id)
        .order_by(WireTransfer.id.desc())
        .all()
    )


def get_wire_transfers(db: Session, status: Optional[str] = "pending") -> List[WireTransfer]:
    query = db.query(WireTransfer)
    if status:
        query = query.filter(WireTransfer.status == status)
    return query.order_by(WireTransfer.id).all()


def decide_wire_transfer(db: Session, wire_id: int, approve: bool) -> WireTransfer:
    """Approval takes amount plus fee from the account in the same commit that completes the wire."""
    wire = get_wire_transfer(db, wire_id)
    if not wire:
        raise NotFoundError("Wire transfer not found")
    if wire.status != "pending":
        raise ValidationError(f"Wire transfer already {wire.status}")

    account = None
    if approve:
        account = get_account(db, wire.account_id)
        if not account:
            raise NotFoundError("Account not found")

    claimed = (
        db.query(WireTransfer)
        .filter(WireTransfer.id == wire_id, WireTransfer.status == "pending")
        .update(
            {
                WireTransfer.status: "completed" if approve else "cancelled",
                WireTransfer.decided_at: datetime.datetime.utcnow(),
            },
            synchronize_session=False,
        )
    )
    if not claimed:
        db.rollback()
        raise ValidationError("Wire transfer already decided")
    if account is not None:
        if not apply_debit(db, account.id, balance_field_for(account.account_type), wire.total_amount):
            # wire stays pending
            db.rollback()
            raise InsufficientBalanceError("Insufficient balance to complete this wire transfer")
    db.commit()
    db.refresh(wire)
    return wire
