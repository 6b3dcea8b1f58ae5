from __future__ import annotations
import hmac
import os
from datetime import datetime, timedelta, timezone
from typing import Any
import jwt
from passlib.context import CryptContext
from gateway.config import Settings, settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
JWT_ALG = "HS256"
ACCESS_TTL_MIN = int(os.getenv("ACCESS_TTL_MIN", "60"))
REFRESH_TTL_MIN = int(os.getenv("REFRESH_TTL_MIN", "10080"))  # 7d

ADMIN_SUBJECT = "admin"

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)

def check_admin_password(password: str, cfg: Settings = settings) -> bool:
    """
    Compare a submitted password with the configured admin credential.
    ADMIN_PASSWORD_HASH (bcrypt) wins over ADMIN_PASSWORD; with neither set, nobody can sign in.
    """
    if not password:
        return False
    if cfg.admin_password_hash:
        return verify_password(password, cfg.admin_password_hash)
    if cfg.admin_password:
        return hmac.compare_digest(password.encode(), cfg.admin_password.encode())
    return False

def _make_token(sub: str, ttl_min: int, token_type: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": sub,
        "type": token_type,
        "iat": now.timestamp(),  # float keeps successive tokens distinct
        "exp": int((now + timedelta(minutes=ttl_min)).timestamp()),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALG)

def make_access_token(sub: str = ADMIN_SUBJECT) -> str:
    return _make_token(sub, ACCESS_TTL_MIN, "access")

def make_refresh_token(sub: str = ADMIN_SUBJECT) -> str:
    return _make_token(sub, REFRESH_TTL_MIN, "refresh")

def decode_token(token: str) -> dict[str, Any]:
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])
