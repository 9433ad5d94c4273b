# utils/session.py
import datetime
from dataclasses import dataclass

from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.errors import BankingError, AuthenticationError, PermissionDeniedError
from crud.user_crud import get_session_by_token
from database import get_db
from model.user_model import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="users/login")


@dataclass
class SessionContext:
    """Identity of the caller for one request, resolved from the bearer token."""
    user: User
    token: str
    expires_at: datetime.datetime

    @property
    def user_id(self) -> int:
        return self.user.id

    @property
    def is_admin(self) -> bool:
        return bool(self.user.is_admin)


def resolve_session(db: Session, token: str) -> SessionContext:
    session = get_session_by_token(db, token) if token else None
    if not session or not session.is_active():
        raise AuthenticationError("Session expired or invalid")
    if session.user.is_banned:
        raise PermissionDeniedError("This account has been banned")
    return SessionContext(user=session.user, token=token, expires_at=session.expires_at)


def to_http_error(e: BankingError) -> HTTPException:
    headers = {"WWW-Authenticate": "Bearer"} if e.status_code == 401 else None
    return HTTPException(status_code=e.status_code, detail=str(e), headers=headers)


def get_session_context(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> SessionContext:
    try:
        return resolve_session(db, token)
    except BankingError as e:
        raise to_http_error(e)


def require_admin(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
    if not ctx.is_admin:
        raise HTTPException(status_code=403, detail="Access denied. Admin privileges required.")
    return ctx
