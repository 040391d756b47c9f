# nextai/utils/jwt_util.py
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from nextai.config import settings

logger = logging.getLogger(__name__)


def create_token(subject: str, kind: str = "user", expires_minutes: int | None = None) -> str:
    """Sign a session token for an account.

    ``kind`` tells the two account tables apart (``user`` or ``admin``).
    """
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=expires_minutes or settings.JWT_EXPIRE_MINUTES)
    payload = {
        "sub": str(subject),
        "kind": kind,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Return the claims, or None when the signature or expiry check fails."""
    if not token:
        return None
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.info("token rejected (%s...): %s", token[:12], e)
        return None


def parse_bearer_token(authorization: str | None) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, value = authorization.partition(" ")
    if scheme.lower() != "bearer" or not value.strip():
        return None
    return value.strip()
