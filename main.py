import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import uvicorn

import settings
import model.user_model  # ensures SQLAlchemy sees every table
import model.session_model
import model.account_model
import model.cards_model
import model.transaction_model
import model.transfer_intent_model
import model.deposit_model
import model.internal_transfer_model
import model.wire_transfer_model
from database import Base, engine, SessionLocal
from crud.user_crud import create_user, get_user_by_email
from schemas.user_schemas import UserCreate
from router.user_router import router as user_router
from router.account_router import router as account_router
from router.payment_router import router as payment_router
from router.deposit_router import router as deposit_router
from router.wire_router import router as wire_router
from router.admin_router import router as admin_router

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create all tables
Base.metadata.create_all(bind=engine)


def ensure_bootstrap_admin():
    """Creates the first admin from BOOTSTRAP_ADMIN_EMAIL / BOOTSTRAP_ADMIN_PASSWORD if set."""
    email = settings.BOOTSTRAP_ADMIN_EMAIL
    password = settings.BOOTSTRAP_ADMIN_PASSWORD
    if not email or not password:
        return
    with SessionLocal() as db:
        if get_user_by_email(db, email):
            return
        create_user(db, UserCreate(email=email, password=password, full_name="Administrator"), is_admin=True)
        logger.info(f"Created bootstrap admin {email}")


ensure_bootstrap_admin()

app = FastAPI(
    title="Retail Banking API",
    version="1.0.0",
    description="Accounts, transfers, cards, card funding, deposits, wires and admin console backend",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(user_router, prefix="/users", tags=["users"])
app.include_router(account_router, prefix="/accounts", tags=["accounts"])
app.include_router(payment_router, prefix="/cards", tags=["cards"])
app.include_router(deposit_router, prefix="/deposits", tags=["deposits"])
app.include_router(wire_router, prefix="/wires", tags=["wires"])
app.include_router(admin_router, prefix="/admin", tags=["admin"])


@app.get("/")
def root():
    return {"message": "Retail Banking API", "version": app.version, "status": "ok"}


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
