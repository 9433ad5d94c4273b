# router/wire_router.py

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from app.errors import BankingError
from crud.account_crud import get_user_account
from crud.wire_crud import create_wire_transfer, get_user_wire_transfers
from database import get_db
from schemas.transfer_schemas import WireTransferCreate, WireTransferOut
from utils.session import SessionContext, get_session_context, to_http_error

router = APIRouter()

@router.post("/", response_model=WireTransferOut, status_code=201)
def request_wire(payload: WireTransferCreate, ctx: SessionContext = Depends(get_session_context), db: Session = Depends(get_db)):
    account = get_user_account(db, ctx.user_id, payload.account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")
    try:
        return create_wire_transfer(db, ctx.user, account, payload)
    except BankingError as e:
        raise to_http_error(e)

@router.get("/", response_model=List[WireTransferOut])
def list_wires(ctx: SessionContext = Depends(get_session_context), db: Session = Depends(get_db)):
    return get_user_wire_transfers(db, ctx.user_id)
