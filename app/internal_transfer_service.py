# app/internal_transfer_service.py

import logging

from sqlalchemy.orm import Session

from app.card_funding_service import AccountLedger, parse_amount
from app.errors import InsufficientBalanceError, ValidationError
from crud import account_crud
from crud.card_crud import format_currency
from model.internal_transfer_model import InternalTransfer

logger = logging.getLogger(__name__)


def transfer_between_accounts(db: Session, user_id: int, source, target, amount) -> InternalTransfer:
    """Moves money between the caller's own checking and savings accounts."""
    if source is None or target is None:
        raise ValidationError("Please select both accounts")
    if source.id == target.id:
        raise ValidationError("Please choose two different accounts")
    amount = parse_amount(amount)

    available = account_crud.current_balance(source)
    if available < amount:
        source_type = getattr(source.account_type, "value", source.account_type)
        raise InsufficientBalanceError(
            f"Insufficient balance in {source_type} account. Available: {format_currency(available)}"
        )

    transfer = AccountLedger(db).transfer(user_id, source, target, amount)
    logger.info(f"Moved {amount} from account {transfer.from_account_id} to {transfer.to_account_id} ({transfer.reference})")
    return transfer
