"""
Local account authentication.

Features:
- One-way password hashing (passlib, pbkdf2_sha256)
- Signed, time-limited bearer tokens (python-jose JWT)
- Generic failure for unknown email and wrong password alike

The chat engine never calls into this module: usernames on websocket
events are taken as the client sends them.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from zenwhisper.core.config import settings
from zenwhisper.core.logging import get_logger
from zenwhisper.models.models import UserRecord
from zenwhisper.services.user_store import UserStore

logger = get_logger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def create_access_token(user: UserRecord, expires_minutes: Optional[int] = None) -> str:
    """Issue a signed token carrying the user's email (``sub``) and username."""
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    claims = {"sub": user.email, "username": user.username, "exp": expire}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the token's claims, or None if it is invalid or expired."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected token: {e}")
        return None


def register_user(store: UserStore, username: str, email: str, password: str) -> UserRecord:
    record = UserRecord(username=username, email=email, password=hash_password(password))
    return store.add(record)


def authenticate(store: UserStore, email: str, password: str) -> Optional[UserRecord]:
    """Return the matching user, or None without saying which check failed."""
    record = store.get_by_email(email)
    if record is None or not verify_password(password, record.password):
        return None
    return record
