# router/deposit_router.py

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from crud.account_crud import get_user_account
from crud.deposit_crud import create_deposit_request, get_user_deposits
from database import get_db
from schemas.deposit_schemas import DepositCreate, DepositOut
from utils.session import SessionContext, get_session_context

router = APIRouter()

@router.post("/", response_model=DepositOut, status_code=201)
def request_deposit(payload: DepositCreate, ctx: SessionContext = Depends(get_session_context), db: Session = Depends(get_db)):
    if not get_user_account(db, ctx.user_id, payload.account_id):
        raise HTTPException(status_code=404, detail="Account not found")
    return create_deposit_request(db, ctx.user_id, payload)

@router.get("/", response_model=List[DepositOut])
def list_deposits(ctx: SessionContext = Depends(get_session_context), db: Session = Depends(get_db)):
    return get_user_deposits(db, ctx.user_id)
