# router/admin_router.py

import asyncio
import logging
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from fastapi.concurrency import run_in_threadpool
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from app.card_funding_service import recover_incomplete_transfers
from app.change_feed import change_feed, PROFILES
from app.errors import BankingError
from crud.deposit_crud import get_deposits, decide_deposit
from crud.user_crud import create_user, get_user_by_email, get_all_users, set_banned, set_wire_block
from crud.wire_crud import get_wire_transfers, decide_wire_transfer
from database import SessionLocal, get_db
from schemas.deposit_schemas import DepositOut
from schemas.payment_schemas import RecoveryOut
from schemas.transfer_schemas import WireTransferOut, WireBlockIn
from schemas.user_schemas import AdminUserCreate, UserOut, BanIn
from utils.session import SessionContext, require_admin, resolve_session, to_http_error

logger = logging.getLogger(__name__)

router = APIRouter()


# ─── Users ───────────────────────────────────────────────────────────────────────

@router.get("/users", response_model=List[UserOut])
def list_users(
    search: Optional[str] = None,
    ctx: SessionContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return get_all_users(db, search)

@router.post("/users", response_model=UserOut, status_code=201)
def add_user(payload: AdminUserCreate, ctx: SessionContext = Depends(require_admin), db: Session = Depends(get_db)):
    if get_user_by_email(db, payload.email):
        raise HTTPException(status_code=400, detail="Email already registered")
    try:
        return create_user(db, payload, is_admin=payload.is_admin)
    except BankingError as e:
        raise to_http_error(e)

@router.post("/users/{user_id}/ban", response_model=UserOut)
def ban_user(
    user_id: int,
    payload: Optional[BanIn] = None,
    ctx: SessionContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if user_id == ctx.user_id:
        raise HTTPException(status_code=400, detail="Admins cannot ban themselves")
    user = set_banned(db, user_id, True, payload.reason if payload else None)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user

@router.post("/users/{user_id}/unban", response_model=UserOut)
def unban_user(user_id: int, ctx: SessionContext = Depends(require_admin), db: Session = Depends(get_db)):
    user = set_banned(db, user_id, False)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.websocket("/users/feed")
async def users_feed(ws: WebSocket, token: str = Query("")):
    """Pushes the full user list again whenever a profile row changes."""
    try:
        admin_id, is_admin = await run_in_threadpool(_authorize_feed, token)
    except BankingError:
        await ws.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    if not is_admin:
        await ws.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await ws.accept()
    queue = change_feed.subscribe(PROFILES)
    receiver = asyncio.create_task(_wait_for_disconnect(ws))
    try:
        await ws.send_json({"type": "snapshot", "users": await run_in_threadpool(_load_users)})
        while True:
            getter = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait({getter, receiver}, return_when=asyncio.FIRST_COMPLETED)
            if receiver in done:
                getter.cancel()
                break
            users = await run_in_threadpool(_load_users)
            await ws.send_json({"type": "profiles_changed", "event": getter.result(), "users": users})
    except WebSocketDisconnect:
        logger.debug(f"Admin {admin_id} disconnected while a push was in flight")
    finally:
        receiver.cancel()
        change_feed.unsubscribe(PROFILES, queue)
        logger.info(f"Admin {admin_id} left the user feed")


async def _wait_for_disconnect(ws: WebSocket) -> None:
    # the feed is one-way; anything the client sends is ignored
    while True:
        message = await ws.receive()
        if message["type"] == "websocket.disconnect":
            return


# blocking database work for the feed runs in the threadpool, each call in its own session

def _authorize_feed(token: str) -> Tuple[int, bool]:
    with SessionLocal() as db:
        ctx = resolve_session(db, token)
        return ctx.user_id, ctx.is_admin


def _load_users() -> list:
    with SessionLocal() as db:
        return jsonable_encoder([UserOut.model_validate(u) for u in get_all_users(db)])


# ─── Deposits ────────────────────────────────────────────────────────────────────

@router.get("/deposits", response_model=List[DepositOut])
def list_deposits(
    status_filter: Optional[str] = Query("pending", alias="status"),
    ctx: SessionContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return get_deposits(db, status_filter or None)

@router.post("/deposits/{deposit_id}/approve", response_model=DepositOut)
def approve_deposit(deposit_id: int, ctx: SessionContext = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        return decide_deposit(db, deposit_id, approve=True)
    except BankingError as e:
        raise to_http_error(e)

@router.post("/deposits/{deposit_id}/reject", response_model=DepositOut)
def reject_deposit(deposit_id: int, ctx: SessionContext = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        return decide_deposit(db, deposit_id, approve=False)
    except BankingError as e:
        raise to_http_error(e)


# ─── Wire transfers ──────────────────────────────────────────────────────────────

@router.get("/wires", response_model=List[WireTransferOut])
def list_wires(
    status_filter: Optional[str] = Query("pending", alias="status"),
    ctx: SessionContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return get_wire_transfers(db, status_filter or None)

@router.post("/wires/{wire_id}/approve", response_model=WireTransferOut)
def approve_wire(wire_id: int, ctx: SessionContext = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        wire = decide_wire_transfer(db, wire_id, approve=True)
    except BankingError as e:
        raise to_http_error(e)
    logger.info(f"Admin {ctx.user_id} approved wire {wire.confirmation_number}")
    return wire

@router.post("/wires/{wire_id}/cancel", response_model=WireTransferOut)
def cancel_wire(wire_id: int, ctx: SessionContext = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        return decide_wire_transfer(db, wire_id, approve=False)
    except BankingError as e:
        raise to_http_error(e)

@router.post("/users/{user_id}/wire-block", response_model=UserOut)
def block_wires(
    user_id: int,
    payload: WireBlockIn,
    ctx: SessionContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = set_wire_block(db, user_id, payload.blocked, payload.reason)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


# ─── Transfers ───────────────────────────────────────────────────────────────────

@router.post("/transfers/recover", response_model=RecoveryOut)
def recover_transfers(
    older_than_seconds: Optional[int] = Query(None, ge=0),
    ctx: SessionContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if older_than_seconds is None:
        return recover_incomplete_transfers(db)
    return recover_incomplete_transfers(db, older_than_seconds)
