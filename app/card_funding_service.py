# app/card_funding_service.py

import datetime
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import (
    BankingError,
    BackendError,
    CreditFailedError,
    DebitFailedError,
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
)
from crud import account_crud, card_crud, internal_transfer_crud, payment_crud, transfer_crud
from model.transaction_model import TransactionTypeEnum
from model.transfer_intent_model import (
    INTENT_PENDING,
    INTENT_DEBITED,
    INTENT_CREDITED,
    INTENT_FAILED,
    INTENT_REVERSED,
)
from settings import TRANSFER_RECOVERY_AGE_SECONDS

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


# ─── Accessors ───────────────────────────────────────────────────────────────────
# Each write commits on its own, the way the hosted tables behaved. Storage
# failures surface as BackendError so the orchestrator never sees SQLAlchemy.

class AccountLedger:
    """Reads and writes the checking/savings balance fields of accounts."""

    def __init__(self, db: Session):
        self.db = db

    def debit(self, account_id: int, balance_field: str, amount: Decimal, intent_id: Optional[int] = None):
        try:
            account = account_crud.debit_account(self.db, account_id, balance_field, amount, intent_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Debit of account {account_id} failed: {e}")
            raise DebitFailedError("Failed to transfer money from account") from e
        if account is None:
            raise InsufficientBalanceError("Insufficient balance: the account balance changed, please retry")
        return account

    def credit(
        self,
        account_id: int,
        balance_field: str,
        amount: Decimal,
        intent_id: Optional[int] = None,
        intent_status: Optional[str] = None,
    ):
        try:
            account = account_crud.credit_account(
                self.db, account_id, balance_field, amount, intent_id, intent_status
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise BackendError("Failed to credit account") from e
        if account is None:
            raise NotFoundError("Account not found")
        return account

    def transfer(self, user_id: int, source, target, amount: Decimal):
        """Debit and credit of two accounts of one owner, committed together."""
        source_id, target_id = source.id, target.id
        try:
            transfer = internal_transfer_crud.create_internal_transfer(self.db, user_id, source, target, amount)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Transfer from account {source_id} to {target_id} failed: {e}")
            raise BackendError("Failed to transfer money between accounts") from e
        if transfer is None:
            raise InsufficientBalanceError("Insufficient balance: the account balance changed, please retry")
        return transfer

    def list_accounts(self, owner_id: int):
        return account_crud.get_accounts(self.db, owner_id)


class CardBalances:
    """Reads and writes a card's spendable balance."""

    def __init__(self, db: Session):
        self.db = db

    def credit(self, card_id: int, amount: Decimal, intent_id: Optional[int] = None):
        try:
            card = card_crud.credit_card(self.db, card_id, amount, intent_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise BackendError("Failed to add money to card") from e
        if card is None:
            raise NotFoundError("Card not found")
        return card

    def list_cards(self, owner_id: int):
        return card_crud.get_cards(self.db, owner_id)


class CardTransactionRecorder:
    """Insert-only audit trail of card fund movements."""

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        card_id: int,
        user_id: int,
        amount: Decimal,
        transaction_type: TransactionTypeEnum,
        merchant_name: str,
        status: str = "completed",
        intent_id: Optional[int] = None,
    ) -> None:
        try:
            payment_crud.create_card_transaction(
                self.db,
                card_id=card_id,
                user_id=user_id,
                merchant_name=merchant_name,
                amount=amount,
                transaction_type=transaction_type,
                status=status,
                intent_id=intent_id,
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise BackendError("Failed to record card transaction") from e


class TransferIntents:
    def __init__(self, db: Session):
        self.db = db

    def open(self, user_id: int, account_id: int, card_id: int, balance_field: str, amount: Decimal) -> int:
        try:
            intent = transfer_crud.open_intent(self.db, user_id, account_id, card_id, balance_field, amount)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise BackendError("Failed to start transfer") from e
        return intent.id

    def mark(self, intent_id: int, status: str, error: Optional[str] = None) -> bool:
        """Best effort; an unmarked intent is picked up by the recovery sweep."""
        try:
            transfer_crud.mark_intent(self.db, intent_id, status, error)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(f"Could not mark transfer intent {intent_id} as {status}: {e}")
            return False
        return True


# ─── Orchestrator ────────────────────────────────────────────────────────────────

@dataclass
class FundingResult:
    intent_id: int
    amount: Decimal
    account_balance: Decimal
    card_balance: Decimal
    audit_recorded: bool
    accounts: List = field(default_factory=list)
    cards: List = field(default_factory=list)


def parse_amount(amount) -> Decimal:
    try:
        value = Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        raise ValidationError("Please enter a valid amount")
    # rounded first so sub-cent amounts cannot slip through as 0.00
    if not value.is_finite() or value <= 0:
        raise ValidationError("Please enter a valid amount")
    return value


class CardFundingService:
    """
    Moves money from a checking/savings account onto a card.

    The account and card passed to fund_card are the rows the caller already
    loaded; their balances are trusted for the up-front check, and the debit
    itself is guarded so a stale value cannot overdraw the account.
    """

    def __init__(self, ledger, cards, recorder, intents):
        self.ledger = ledger
        self.cards = cards
        self.recorder = recorder
        self.intents = intents

    @classmethod
    def for_session(cls, db: Session) -> "CardFundingService":
        return cls(AccountLedger(db), CardBalances(db), CardTransactionRecorder(db), TransferIntents(db))

    def fund_card(self, account, card, user_id: int, amount) -> FundingResult:
        if account is None or card is None:
            raise ValidationError("Please select an account and a card")
        amount = parse_amount(amount)

        # 1. the balance field depends on the account type
        balance_field = account_crud.balance_field_for(account.account_type)
        account_type = getattr(account.account_type, "value", account.account_type)

        # 2. check against the balance the caller loaded
        available = account_crud.current_balance(account)
        if available < amount:
            raise InsufficientBalanceError(
                f"Insufficient balance in {account_type} account. "
                f"Available: {card_crud.format_currency(available)}"
            )

        account_id, card_id = account.id, card.id
        intent_id = self.intents.open(user_id, account_id, card_id, balance_field, amount)

        # 3./4. debit; nothing has moved if this fails
        try:
            debited = self.ledger.debit(account_id, balance_field, amount, intent_id=intent_id)
        except BankingError as e:
            self.intents.mark(intent_id, INTENT_FAILED, str(e))
            logger.warning(f"Funding card {card_id}: debit of account {account_id} failed: {e}")
            raise

        # 5./6. credit; undo the debit once if this fails
        try:
            credited = self.cards.credit(card_id, amount, intent_id=intent_id)
        except BankingError as e:
            logger.error(f"Funding card {card_id}: credit failed after debit of account {account_id}: {e}")
            compensated = self._compensate(intent_id, account_id, balance_field, amount)
            raise CreditFailedError("Failed to add money to card", compensated=compensated) from e

        # 7. audit row; the money has already moved, so a failure here only gets logged
        audit_recorded = True
        try:
            self.recorder.record(
                card_id=card_id,
                user_id=user_id,
                amount=amount,
                transaction_type=TransactionTypeEnum.PAYMENT,
                merchant_name=f"Transfer from {account_type} account",
                status="completed",
                intent_id=intent_id,
            )
        except BankingError as e:
            audit_recorded = False
            logger.warning(f"Funding card {card_id}: audit record missing for intent {intent_id}: {e}")

        logger.info(f"Funded card {card_id} with {amount} from account {account_id} (intent {intent_id})")

        # 8. refresh from storage
        return FundingResult(
            intent_id=intent_id,
            amount=amount,
            account_balance=account_crud.current_balance(debited),
            card_balance=Decimal(str(credited.current_balance)),
            audit_recorded=audit_recorded,
            accounts=self.ledger.list_accounts(user_id),
            cards=self.cards.list_cards(user_id),
        )

    def _compensate(self, intent_id: int, account_id: int, balance_field: str, amount: Decimal) -> bool:
        try:
            self.ledger.credit(
                account_id,
                balance_field,
                amount,
                intent_id=intent_id,
                intent_status=INTENT_REVERSED,
            )
        except BankingError as e:
            # intent stays "debited"; the recovery sweep will reverse it
            logger.error(f"Compensating credit of account {account_id} failed for intent {intent_id}: {e}")
            return False
        logger.info(f"Restored {amount} to account {account_id} (intent {intent_id})")
        return True


# ─── Recovery ────────────────────────────────────────────────────────────────────

def recover_incomplete_transfers(
    db: Session,
    older_than_seconds: int = TRANSFER_RECOVERY_AGE_SECONDS,
    now: Optional[datetime.datetime] = None,
) -> dict:
    """
    Settles funding attempts that stopped half way:
    pending -> failed, debited -> reversed, credited -> audit row written.
    """
    cutoff = (now or datetime.datetime.utcnow()) - datetime.timedelta(seconds=older_than_seconds)
    ledger = AccountLedger(db)
    recorder = CardTransactionRecorder(db)
    intents = TransferIntents(db)
    counts = {"failed": 0, "reversed": 0, "completed": 0, "errors": 0}

    for intent in transfer_crud.get_stale_intents(db, cutoff):
        intent_id, status = intent.id, intent.status
        try:
            if status == INTENT_PENDING:
                if not intents.mark(intent_id, INTENT_FAILED, "abandoned before debit"):
                    counts["errors"] += 1
                    continue
                counts["failed"] += 1
            elif status == INTENT_DEBITED:
                ledger.credit(
                    intent.account_id,
                    intent.balance_field,
                    Decimal(str(intent.amount)),
                    intent_id=intent_id,
                    intent_status=INTENT_REVERSED,
                )
                counts["reversed"] += 1
            elif status == INTENT_CREDITED:
                account_type = account_crud.ACCOUNT_TYPES_BY_FIELD.get(intent.balance_field, "account")
                recorder.record(
                    card_id=intent.card_id,
                    user_id=intent.user_id,
                    amount=Decimal(str(intent.amount)),
                    transaction_type=TransactionTypeEnum.PAYMENT,
                    merchant_name=f"Transfer from {account_type} account",
                    intent_id=intent_id,
                )
                counts["completed"] += 1
        except BankingError as e:
            counts["errors"] += 1
            logger.error(f"Recovery of transfer intent {intent_id} ({status}) failed: {e}")
            continue
        logger.info(f"Recovered transfer intent {intent_id} from status {status}")

    return counts
