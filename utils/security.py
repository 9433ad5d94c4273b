# utils/security.py
import secrets

from cryptography.fernet import Fernet, InvalidToken
from passlib.context import CryptContext

from settings import FERNET_KEY

if not FERNET_KEY:
    raise RuntimeError("Set FERNET_KEY in your environment")

fernet = Fernet(FERNET_KEY.encode())

# Password hashing context
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def encrypt_value(raw: str) -> str:
    """
    Encrypts sensitive card data (number, CVV) into a token you can safely store in DB.
    """
    token = fernet.encrypt(raw.encode())
    return token.decode()


def decrypt_value(token: str) -> str:
    """
    Decrypts the token back into the original value.
    Raises ValueError on tampering or wrong key.
    """
    try:
        raw = fernet.decrypt(token.encode())
        return raw.decode()
    except InvalidToken:
        raise ValueError("Invalid encryption token for card data")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def new_session_token() -> str:
    return secrets.token_urlsafe(32)
