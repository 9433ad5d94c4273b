# router/user_router.py

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from fastapi.security import OAuth2PasswordRequestForm

from app.errors import BankingError
from crud.user_crud import create_user, get_user_by_email, authenticate, create_session, revoke_session
from schemas.user_schemas import UserCreate, UserOut, TokenOut
from database import get_db
from utils.session import SessionContext, get_session_context, to_http_error

router = APIRouter()

@router.post("/register", response_model=UserOut)
def register(user: UserCreate, db: Session = Depends(get_db)):
    db_user = get_user_by_email(db, email=user.email)
    if db_user:
        raise HTTPException(status_code=400, detail="Email already registered")
    try:
        return create_user(db, user)
    except BankingError as e:
        raise to_http_error(e)

@router.post("/login", response_model=TokenOut)
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    user = authenticate(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(status_code=400, detail="Incorrect email or password")
    if user.is_banned:
        raise HTTPException(status_code=403, detail="This account has been banned")
    session = create_session(db, user)
    return {"access_token": session.token, "token_type": "bearer", "expires_at": session.expires_at}

@router.post("/logout", status_code=204)
def logout(ctx: SessionContext = Depends(get_session_context), db: Session = Depends(get_db)):
    revoke_session(db, ctx.token)

@router.get("/me", response_model=UserOut)
def me(ctx: SessionContext = Depends(get_session_context)):
    return ctx.user
