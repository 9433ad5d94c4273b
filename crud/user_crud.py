# crud/user_crud.py

import datetime
from typing import Optional, List

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.change_feed import change_feed, PROFILES
from crud.account_crud import generate_account_number, build_default_accounts
from model.session_model import UserSession
from model.user_model import User
from schemas.user_schemas import UserCreate
from settings import SESSION_TTL_MINUTES
from utils.security import get_password_hash, verify_password, new_session_token


def create_user(db: Session, user_in: UserCreate, is_admin: bool = False) -> User:
    """Creates the profile plus its checking and savings accounts in one commit."""
    db_user = User(
        email=user_in.email,
        hashed_password=get_password_hash(user_in.password),
        full_name=user_in.full_name,
        account_number=generate_account_number(db),
        is_admin=is_admin,
    )
    db.add(db_user)
    db.flush()
    build_default_accounts(db, db_user)
    db.commit()
    db.refresh(db_user)
    change_feed.publish(PROFILES, "INSERT", db_user.id)
    return db_user


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def get_all_users(db: Session, search: Optional[str] = None) -> List[User]:
    query = db.query(User)
    if search:
        pattern = f"%{search.lower()}%"
        query = query.filter(or_(User.full_name.ilike(pattern), User.email.ilike(pattern)))
    return query.order_by(User.created_at.desc(), User.id.desc()).all()


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user


def set_banned(db: Session, user_id: int, banned: bool, reason: Optional[str] = None) -> Optional[User]:
    db_user = get_user(db, user_id)
    if not db_user:
        return None
    db_user.is_banned = banned
    db_user.ban_reason = (reason or "No reason provided") if banned else None
    if banned:
        # a ban ends every open session of that user
        now = datetime.datetime.utcnow()
        db.query(UserSession).filter(
            UserSession.user_id == user_id,
            UserSession.revoked_at.is_(None),
        ).update({UserSession.revoked_at: now}, synchronize_session=False)
    db.commit()
    db.refresh(db_user)
    change_feed.publish(PROFILES, "UPDATE", db_user.id)
    return db_user


def set_wire_block(db: Session, user_id: int, blocked: bool, reason: Optional[str] = None) -> Optional[User]:
    db_user = get_user(db, user_id)
    if not db_user:
        return None
    db_user.wire_transfers_blocked = blocked
    db_user.wire_transfer_block_reason = reason if blocked else None
    db.commit()
    db.refresh(db_user)
    change_feed.publish(PROFILES, "UPDATE", db_user.id)
    return db_user


# ─── Sessions ────────────────────────────────────────────────────────────────────

def create_session(db: Session, user: User) -> UserSession:
    now = datetime.datetime.utcnow()
    session = UserSession(
        token=new_session_token(),
        user_id=user.id,
        created_at=now,
        expires_at=now + datetime.timedelta(minutes=SESSION_TTL_MINUTES),
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def get_session_by_token(db: Session, token: str) -> Optional[UserSession]:
    return db.query(UserSession).filter(UserSession.token == token).first()


def revoke_session(db: Session, token: str) -> bool:
    session = get_session_by_token(db, token)
    if not session or session.revoked_at is not None:
        return False
    session.revoked_at = datetime.datetime.utcnow()
    db.commit()
    return True
