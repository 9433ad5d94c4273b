# router/account_router.py

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List

from app.errors import BankingError
from app.internal_transfer_service import transfer_between_accounts
from crud.account_crud import get_accounts, get_user_account
from crud.internal_transfer_crud import get_user_internal_transfers
from database import get_db
from schemas.account_schemas import AccountOut
from schemas.transfer_schemas import InternalTransferIn, InternalTransferOut, InternalTransferResult
from utils.session import SessionContext, get_session_context, to_http_error

router = APIRouter()

@router.get("/", response_model=List[AccountOut])
def list_accounts(ctx: SessionContext = Depends(get_session_context), db: Session = Depends(get_db)):
    return get_accounts(db, ctx.user_id)

# ─── Internal transfers (declared before /{account_id}) ──────────────────────────

@router.post("/transfers", response_model=InternalTransferResult, status_code=201)
def create_transfer(
    payload: InternalTransferIn,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    source = get_user_account(db, ctx.user_id, payload.from_account_id)
    target = get_user_account(db, ctx.user_id, payload.to_account_id)
    if not source or not target:
        raise HTTPException(status_code=404, detail="Account not found")
    try:
        transfer = transfer_between_accounts(db, ctx.user_id, source, target, payload.amount)
    except BankingError as e:
        raise to_http_error(e)
    return InternalTransferResult(
        transfer=InternalTransferOut.model_validate(transfer),
        accounts=[AccountOut.model_validate(a) for a in get_accounts(db, ctx.user_id)],
    )

@router.get("/transfers", response_model=List[InternalTransferOut])
def list_transfers(
    limit: int = Query(50, ge=1, le=200),
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    return get_user_internal_transfers(db, ctx.user_id, limit)

@router.get("/{account_id}", response_model=AccountOut)
def read_account(account_id: int, ctx: SessionContext = Depends(get_session_context), db: Session = Depends(get_db)):
    account = get_user_account(db, ctx.user_id, account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")
    return account
