# nextai/services/verification_service.py
"""Verification codes for email confirmation and password reset.

One implementation serves both account tables: a code owner is either a
``User`` or an ``Admin``, and every lookup is scoped by that owner.

Lifecycle of a row: issued (active, unused) -> consumed once (inactive,
used). Expiry is computed from ``expires_at``; expired rows stay in place.
"""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy.orm import Session

from nextai.models import Admin, User, VerificationCode
from nextai.models.verifycode_model import PURPOSE_RESET, PURPOSE_SIGNUP
from nextai.utils.time_util import minutes_from_now, utcnow

logger = logging.getLogger(__name__)

CodeOwner = Union[User, Admin]

CODE_MIN = 100000
CODE_MAX = 999999

REASON_VALID = "valid"
REASON_INVALID = "invalid"
REASON_INACTIVE = "inactive"
REASON_EXPIRED = "expired"

REASON_MESSAGES = {
    REASON_VALID: "Code is valid",
    REASON_INVALID: "Invalid verification code",
    REASON_INACTIVE: "Verification code is no longer active",
    REASON_EXPIRED: "Verification code has expired",
}

__all__ = [
    "CodeOwner", "CodeCheck", "PURPOSE_SIGNUP", "PURPOSE_RESET",
    "generate_code", "issue_code", "validate_code", "consume_code",
]


@dataclass
class CodeCheck:
    is_valid: bool
    reason: str
    record: Optional[VerificationCode] = None

    @property
    def message(self) -> str:
        return REASON_MESSAGES[self.reason]


def generate_code() -> str:
    # Uniqueness among active codes is not checked; lookups are owner-scoped
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


def _owner_filter(query, owner: CodeOwner):
    if isinstance(owner, Admin):
        return query.filter(VerificationCode.admin_id == owner.id)
    return query.filter(VerificationCode.user_id == owner.id)


def invalidate_codes(session: Session, owner: CodeOwner, purpose: str) -> int:
    """Deactivate every unused code the owner holds for ``purpose``."""
    q = session.query(VerificationCode).filter(
        VerificationCode.purpose == purpose,
        VerificationCode.is_used.is_(False),
        VerificationCode.is_active.is_(True),
    )
    return _owner_filter(q, owner).update(
        {VerificationCode.is_active: False}, synchronize_session="fetch"
    )


def issue_code(session: Session, owner: CodeOwner, purpose: str, ttl_minutes: int) -> VerificationCode:
    """Create a fresh code for ``owner``; prior unused codes for the same purpose stop working.

    The caller commits, and is responsible for delivering ``record.code``.
    """
    invalidated = invalidate_codes(session, owner, purpose)
    record = VerificationCode(
        code=generate_code(),
        purpose=purpose,
        expires_at=minutes_from_now(ttl_minutes),
        is_active=True,
        is_used=False,
    )
    if isinstance(owner, Admin):
        record.admin_id = owner.id
    else:
        record.user_id = owner.id
    session.add(record)
    session.flush()
    logger.info("issued %s code for %s %s (%d prior invalidated)",
                purpose, owner.kind, owner.id, invalidated)
    return record


def validate_code(session: Session, owner: CodeOwner, code, purpose: str) -> CodeCheck:
    """Check ``code`` against the owner's codes for ``purpose``.

    Valid iff the newest matching row is active, unused and not yet expired.
    """
    code = str(code or "").strip()
    if not code:
        return CodeCheck(False, REASON_INVALID)

    q = session.query(VerificationCode).filter(
        VerificationCode.code == code,
        VerificationCode.purpose == purpose,
    )
    record = (_owner_filter(q, owner)
              .order_by(VerificationCode.created_at.desc())
              .first())
    if record is None:
        return CodeCheck(False, REASON_INVALID)
    if record.is_used or not record.is_active:
        return CodeCheck(False, REASON_INACTIVE, record)
    if record.is_expired(utcnow()):
        return CodeCheck(False, REASON_EXPIRED, record)
    return CodeCheck(True, REASON_VALID, record)


def consume_code(record: VerificationCode) -> None:
    """Mark a validated code used. Call inside the transaction it authorizes."""
    record.is_used = True
    record.is_active = False

