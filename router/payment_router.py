# router/payment_router.py

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from app.card_funding_service import CardFundingService
from app.errors import BankingError
from crud.account_crud import get_user_account
from crud.card_crud import (
    create_card,
    get_cards,
    get_user_card,
    reveal_card,
    delete_card,
    set_frozen,
    get_freeze_history,
    get_limits,
    update_limits,
)
from crud.payment_crud import get_card_transactions, get_user_card_transactions
from database import get_db
from schemas.account_schemas import AccountOut
from schemas.payment_schemas import (
    CardCreate,
    CardOut,
    CardDetailsOut,
    FreezeIn,
    FreezeHistoryOut,
    CardLimitsOut,
    CardLimitsUpdate,
    CardTransactionOut,
    FundCardIn,
    FundCardOut,
)
from utils.session import SessionContext, get_session_context, to_http_error

router = APIRouter()


def _owned_card(db: Session, ctx: SessionContext, card_id: int):
    card = get_user_card(db, ctx.user_id, card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Card not found")
    return card


@router.post("/", response_model=CardOut, status_code=201)
def add_card(payload: CardCreate, ctx: SessionContext = Depends(get_session_context), db: Session = Depends(get_db)):
    try:
        return create_card(db, ctx.user_id, payload)
    except BankingError as e:
        raise to_http_error(e)

@router.get("/", response_model=List[CardOut])
def list_cards(ctx: SessionContext = Depends(get_session_context), db: Session = Depends(get_db)):
    return get_cards(db, ctx.user_id)

@router.get("/transactions", response_model=List[CardTransactionOut])
def list_user_transactions(
    limit: int = Query(50, ge=1, le=500),
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    return get_user_card_transactions(db, ctx.user_id, limit)

@router.get("/{card_id}", response_model=CardOut)
def read_card(card_id: int, ctx: SessionContext = Depends(get_session_context), db: Session = Depends(get_db)):
    return _owned_card(db, ctx, card_id)

@router.get("/{card_id}/details", response_model=CardDetailsOut)
def read_card_details(card_id: int, ctx: SessionContext = Depends(get_session_context), db: Session = Depends(get_db)):
    card = _owned_card(db, ctx, card_id)
    try:
        return reveal_card(card)
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e))

@router.delete("/{card_id}", status_code=204)
def remove_card(card_id: int, ctx: SessionContext = Depends(get_session_context), db: Session = Depends(get_db)):
    delete_card(db, _owned_card(db, ctx, card_id))

@router.post("/{card_id}/freeze", response_model=CardOut)
def freeze_card(
    card_id: int,
    payload: Optional[FreezeIn] = None,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    return set_frozen(db, _owned_card(db, ctx, card_id), True, payload.reason if payload else None)

@router.post("/{card_id}/unfreeze", response_model=CardOut)
def unfreeze_card(card_id: int, ctx: SessionContext = Depends(get_session_context), db: Session = Depends(get_db)):
    return set_frozen(db, _owned_card(db, ctx, card_id), False)

@router.get("/{card_id}/freeze-history", response_model=List[FreezeHistoryOut])
def read_freeze_history(card_id: int, ctx: SessionContext = Depends(get_session_context), db: Session = Depends(get_db)):
    return get_freeze_history(db, _owned_card(db, ctx, card_id).id)

@router.get("/{card_id}/limits", response_model=CardLimitsOut)
def read_limits(card_id: int, ctx: SessionContext = Depends(get_session_context), db: Session = Depends(get_db)):
    limits = get_limits(db, _owned_card(db, ctx, card_id).id)
    if not limits:
        raise HTTPException(status_code=404, detail="Card limits not found")
    return limits

@router.patch("/{card_id}/limits", response_model=CardLimitsOut)
def change_limits(
    card_id: int,
    payload: CardLimitsUpdate,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    limits = update_limits(db, _owned_card(db, ctx, card_id).id, payload)
    if not limits:
        raise HTTPException(status_code=404, detail="Card limits not found")
    return limits

@router.get("/{card_id}/transactions", response_model=List[CardTransactionOut])
def list_card_transactions(
    card_id: int,
    limit: int = Query(10, ge=1, le=500),
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    return get_card_transactions(db, _owned_card(db, ctx, card_id).id, limit)

@router.post("/{card_id}/fund", response_model=FundCardOut)
def fund_card(
    card_id: int,
    payload: FundCardIn,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    card = _owned_card(db, ctx, card_id)
    account = get_user_account(db, ctx.user_id, payload.account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")
    try:
        result = CardFundingService.for_session(db).fund_card(account, card, ctx.user_id, payload.amount)
    except BankingError as e:
        raise to_http_error(e)
    return FundCardOut(
        intent_id=result.intent_id,
        amount=result.amount,
        account_balance=result.account_balance,
        card_balance=result.card_balance,
        audit_recorded=result.audit_recorded,
        accounts=[AccountOut.model_validate(a) for a in result.accounts],
        cards=[CardOut.model_validate(c) for c in result.cards],
    )
