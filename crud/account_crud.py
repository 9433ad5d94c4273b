# crud/account_crud.py

import random
from decimal import Decimal
from typing import Optional, List, Iterable

from sqlalchemy.orm import Session

from app.errors import ValidationError, BackendError
from crud.transfer_crud import stage_intent_status
from model.account_model import Account, AccountTypeEnum
from model.transfer_intent_model import INTENT_DEBITED
from model.user_model import User
from settings import BANK_CODE, BRANCH_CODE

BALANCE_FIELDS = {
    AccountTypeEnum.CHECKING.value: "checking_balance",
    AccountTypeEnum.SAVINGS.value: "savings_balance",
}
ACCOUNT_TYPES_BY_FIELD = {field: account_type for account_type, field in BALANCE_FIELDS.items()}

MAX_ACCOUNT_NUMBER_ATTEMPTS = 10


def balance_field_for(account_type) -> str:
    key = getattr(account_type, "value", account_type)
    try:
        return BALANCE_FIELDS[key]
    except KeyError:
        raise ValidationError(f"Unsupported account type: {key}")


def current_balance(account) -> Decimal:
    value = getattr(account, balance_field_for(account.account_type))
    return Decimal(str(value or 0))


def generate_account_number(db: Session, taken: Iterable[str] = ()) -> str:
    """401 (bank) + 25 (branch) + 7 random digits, unique across users and accounts."""
    taken = set(taken)
    for _ in range(MAX_ACCOUNT_NUMBER_ATTEMPTS):
        number = f"{BANK_CODE}{BRANCH_CODE}{random.randint(0, 9_999_999):07d}"
        if number in taken:
            continue
        in_users = db.query(User.id).filter(User.account_number == number).first()
        in_accounts = db.query(Account.id).filter(Account.account_number == number).first()
        if not in_users and not in_accounts:
            return number
    raise BackendError("Failed to generate unique account number after maximum attempts")


def build_default_accounts(db: Session, user: User) -> List[Account]:
    """Checking reuses the profile's account number, savings gets a fresh one."""
    checking = Account(
        user_id=user.id,
        account_number=user.account_number,
        account_type=AccountTypeEnum.CHECKING,
        account_name="My Checking Account",
        checking_balance=0,
        savings_balance=0,
        account_status="active",
    )
    savings = Account(
        user_id=user.id,
        account_number=generate_account_number(db, taken=[user.account_number]),
        account_type=AccountTypeEnum.SAVINGS,
        account_name="My Savings Account",
        checking_balance=0,
        savings_balance=0,
        account_status="active",
        interest_rate=Decimal("0.0100"),
    )
    db.add_all([checking, savings])
    return [checking, savings]


def get_accounts(db: Session, user_id: int) -> List[Account]:
    return (
        db.query(Account)
        .filter(Account.user_id == user_id)
        .order_by(Account.account_type, Account.id)
        .all()
    )


def get_account(db: Session, account_id: int) -> Optional[Account]:
    return db.get(Account, account_id)


def get_user_account(db: Session, user_id: int, account_id: int) -> Optional[Account]:
    return (
        db.query(Account)
        .filter(Account.id == account_id, Account.user_id == user_id)
        .first()
    )


def apply_debit(db: Session, account_id: int, balance_field: str, amount: Decimal) -> int:
    """
    Conditional point update, not committed: only applies while the balance still
    covers `amount`. Returns the number of rows touched (0 when the guard rejected).
    """
    column = getattr(Account, balance_field)
    return (
        db.query(Account)
        .filter(Account.id == account_id, column >= amount)
        .update({column: column - amount}, synchronize_session=False)
    )


def debit_account(
    db: Session,
    account_id: int,
    balance_field: str,
    amount: Decimal,
    intent_id: Optional[int] = None,
) -> Optional[Account]:
    """Returns None when the balance no longer covers `amount`."""
    if not apply_debit(db, account_id, balance_field, amount):
        db.rollback()
        return None
    stage_intent_status(db, intent_id, INTENT_DEBITED)
    db.commit()
    return db.get(Account, account_id)


def apply_credit(db: Session, account_id: int, balance_field: str, amount: Decimal) -> int:
    """Increments the balance field without committing; returns the number of rows touched."""
    column = getattr(Account, balance_field)
    return (
        db.query(Account)
        .filter(Account.id == account_id)
        .update({column: column + amount}, synchronize_session=False)
    )


def credit_account(
    db: Session,
    account_id: int,
    balance_field: str,
    amount: Decimal,
    intent_id: Optional[int] = None,
    intent_status: Optional[str] = None,
) -> Optional[Account]:
    if not apply_credit(db, account_id, balance_field, amount):
        db.rollback()
        return None
    if intent_status:
        stage_intent_status(db, intent_id, intent_status)
    db.commit()
    return db.get(Account, account_id)
