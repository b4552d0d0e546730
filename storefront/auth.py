# storefront/auth.py
"""Staff sign-in for the admin console: one configured account, argon2 hashes, short-lived JWTs."""
from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

logger = logging.getLogger(__name__)

STAFF_ROLE = "staff"
TOKEN_AUDIENCE = "storefront-admin"
DEV_PASSWORD = "change-me"

staff_passwords = CryptContext(schemes=["argon2"], deprecated="auto")


def _signing_key() -> str:
    return os.getenv("JWT_SECRET", "dev-secret-change-me")


def _signing_alg() -> str:
    return os.getenv("JWT_ALG", "HS256")


def _token_lifetime() -> timedelta:
    # one working shift unless configured
    try:
        minutes = int(os.getenv("JWT_EXPIRE_MIN", "480"))
    except ValueError:
        minutes = 480
    return timedelta(minutes=minutes)


def staff_password_hash() -> str:
    """ADMIN_PASSWORD_HASH wins; otherwise ADMIN_PASSWORD is hashed at startup."""
    configured = os.getenv("ADMIN_PASSWORD_HASH", "").strip()
    if configured:
        return configured
    plain = os.getenv("ADMIN_PASSWORD")
    if not plain:
        logger.warning("ADMIN_PASSWORD is not set; using the development default")
    return staff_passwords.hash(plain or DEV_PASSWORD)


def check_staff_credentials(email: str, password: str, staff_email: str, password_hash: str) -> bool:
    if email.strip().lower() != staff_email:
        return False
    try:
        return staff_passwords.verify(password, password_hash)
    except ValueError:
        # malformed hash in the environment
        logger.error("ADMIN_PASSWORD_HASH is not a valid argon2 hash")
        return False


def issue_staff_token(staff_email: str) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": staff_email,
        "role": STAFF_ROLE,
        "aud": TOKEN_AUDIENCE,
        "iat": now,
        "exp": now + _token_lifetime(),
    }
    return jwt.encode(claims, _signing_key(), algorithm=_signing_alg())


def staff_from_token(token: str) -> Optional[str]:
    """The staff email a token was issued to, or None when it is expired, forged or not a staff token."""
    try:
        claims = jwt.decode(token, _signing_key(), algorithms=[_signing_alg()], audience=TOKEN_AUDIENCE)
    except JWTError:
        return None
    if claims.get("role") != STAFF_ROLE:
        return None
    return claims.get("sub") or None
