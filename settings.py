# settings.py

import os
from dotenv import load_dotenv

# ─── Load env vars ───────────────────────────────────────────────────────────────
load_dotenv()  # .env with DATABASE_URL, FERNET_KEY, ...

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./banking.db")
SQL_ECHO     = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")
LOG_LEVEL    = os.getenv("LOG_LEVEL", "INFO").upper()

FERNET_KEY = os.getenv("FERNET_KEY")

SESSION_TTL_MINUTES           = int(os.getenv("SESSION_TTL_MINUTES", "60"))
TRANSFER_RECOVERY_AGE_SECONDS = int(os.getenv("TRANSFER_RECOVERY_AGE_SECONDS", "300"))

# Account numbers: bank code + branch code + 7 digits
BANK_CODE   = os.getenv("BANK_CODE", "401")
BRANCH_CODE = os.getenv("BRANCH_CODE", "25")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# First admin account, created at startup when both are set
BOOTSTRAP_ADMIN_EMAIL    = os.getenv("BOOTSTRAP_ADMIN_EMAIL")
BOOTSTRAP_ADMIN_PASSWORD = os.getenv("BOOTSTRAP_ADMIN_PASSWORD")

# Flat fee added to every outgoing wire
WIRE_TRANSFER_FEE = os.getenv("WIRE_TRANSFER_FEE", "5.00")
