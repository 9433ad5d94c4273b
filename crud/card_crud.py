# crud/card_crud.py

import datetime
import logging
import random
from decimal import Decimal
from typing import Optional, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import ValidationError
from crud.transfer_crud import stage_intent_status
from model.cards_model import Card, CardLimits, CardFreezeHistory
from model.transfer_intent_model import INTENT_CREDITED
from schemas.payment_schemas import CardCreate, CardLimitsUpdate
from utils.security import encrypt_value, decrypt_value

logger = logging.getLogger(__name__)

CARD_VALIDITY_YEARS = 4

DEFAULT_LIMITS = {
    "daily_purchase_limit": Decimal("5000"),
    "daily_withdrawal_limit": Decimal("1000"),
    "monthly_limit": Decimal("50000"),
    "daily_spent": Decimal("0"),
    "daily_withdrawn": Decimal("0"),
    "monthly_spent": Decimal("0"),
    "international_transactions_enabled": True,
    "online_transactions_enabled": True,
    "contactless_enabled": True,
    "atm_withdrawals_enabled": True,
}


# ─── Display helpers ─────────────────────────────────────────────────────────────

def mask_card_number(card_number: str) -> str:
    if not card_number or len(card_number) < 12:
        return card_number
    return f"{card_number[:4]} XXXX XXXX {card_number[-4:]}"


def get_card_brand(card_number: str) -> str:
    first_two = card_number[:2]
    if card_number.startswith("4"):
        return "Visa"
    if first_two in ("51", "52", "53", "54", "55"):
        return "Mastercard"
    if first_two in ("34", "37"):
        return "American Express"
    if first_two in ("60", "65"):
        return "Discover"
    return "Unknown"


def format_currency(amount) -> str:
    return f"${Decimal(str(amount)):,.2f}"


def generate_card_number() -> str:
    return "4" + "".join(str(random.randint(0, 9)) for _ in range(15))


def generate_cvv() -> str:
    return str(random.randint(100, 999))


def expiry_for(issued: datetime.datetime):
    """Returns ("MM/YY", first day of the expiry month)."""
    year = issued.year + CARD_VALIDITY_YEARS
    return f"{issued.month:02d}/{year % 100:02d}", datetime.datetime(year, issued.month, 1)


# ─── Cards ───────────────────────────────────────────────────────────────────────

def create_card(db: Session, user_id: int, card_in: CardCreate) -> Card:
    holder = card_in.card_holder_name.strip().upper()
    if not holder:
        raise ValidationError("Please enter a card holder name")

    number = generate_card_number()
    now = datetime.datetime.utcnow()
    expiry_date, expires_at = expiry_for(now)

    card = Card(
        user_id=user_id,
        card_number_encrypted=encrypt_value(number),
        cvv_encrypted=encrypt_value(generate_cvv()),
        card_number_masked=mask_card_number(number),
        card_holder_name=holder,
        expiry_date=expiry_date,
        card_type="debit",
        card_status="active",
        card_color=card_in.card_color,
        card_brand=get_card_brand(number).lower(),
        current_balance=0,
        is_frozen=False,
        issued_at=now,
        expires_at=expires_at,
    )
    db.add(card)
    db.commit()
    db.refresh(card)

    # limits are non-critical: the card stays usable without them
    try:
        db.add(CardLimits(card_id=card.id, user_id=user_id, **DEFAULT_LIMITS))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Default limits not created for card {card.id}: {e}")
    db.refresh(card)
    return card


def get_cards(db: Session, user_id: int) -> List[Card]:
    return (
        db.query(Card)
        .filter(Card.user_id == user_id)
        .order_by(Card.created_at.desc(), Card.id.desc())
        .all()
    )


def get_card(db: Session, card_id: int) -> Optional[Card]:
    return db.get(Card, card_id)


def get_user_card(db: Session, user_id: int, card_id: int) -> Optional[Card]:
    return db.query(Card).filter(Card.id == card_id, Card.user_id == user_id).first()


def reveal_card(card: Card) -> dict:
    return {
        "id": card.id,
        "card_number": decrypt_value(card.card_number_encrypted),
        "cvv": decrypt_value(card.cvv_encrypted),
        "expiry_date": card.expiry_date,
        "card_holder_name": card.card_holder_name,
    }


def delete_card(db: Session, card: Card) -> None:
    db.delete(card)
    db.commit()


def set_frozen(db: Session, card: Card, frozen: bool, reason: Optional[str] = None) -> Card:
    if frozen:
        reason = reason or "User requested freeze"
    else:
        reason = "User requested unfreeze"

    card.is_frozen = frozen
    card.card_status = "frozen" if frozen else "active"
    card.frozen_at = datetime.datetime.utcnow() if frozen else None
    card.freeze_reason = reason if frozen else None
    db.commit()
    db.refresh(card)

    try:
        db.add(CardFreezeHistory(
            card_id=card.id,
            user_id=card.user_id,
            action="freeze" if frozen else "unfreeze",
            reason=reason,
            freeze_type="user_requested",
            initiated_by="user",
        ))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Freeze history not recorded for card {card.id}: {e}")
    db.refresh(card)
    return card


def get_freeze_history(db: Session, card_id: int) -> List[CardFreezeHistory]:
    return (
        db.query(CardFreezeHistory)
        .filter(CardFreezeHistory.card_id == card_id)
        .order_by(CardFreezeHistory.id.desc())
        .all()
    )


def get_limits(db: Session, card_id: int) -> Optional[CardLimits]:
    return db.query(CardLimits).filter(CardLimits.card_id == card_id).first()


def update_limits(db: Session, card_id: int, limits_in: CardLimitsUpdate) -> Optional[CardLimits]:
    limits = get_limits(db, card_id)
    if not limits:
        return None
    for name, value in limits_in.model_dump(exclude_unset=True).items():
        setattr(limits, name, value)
    db.commit()
    db.refresh(limits)
    return limits


def credit_card(
    db: Session,
    card_id: int,
    amount: Decimal,
    intent_id: Optional[int] = None,
) -> Optional[Card]:
    updated = (
        db.query(Card)
        .filter(Card.id == card_id)
        .update(
            {
                Card.current_balance: Card.current_balance + amount,
                Card.last_used_at: datetime.datetime.utcnow(),
            },
            synchronize_session=False,
        )
    )
    if not updated:
        db.rollback()
        return None
    stage_intent_status(db, intent_id, INTENT_CREDITED)
    db.commit()
    return db.get(Card, card_id)
