# nextai/services/auth_service.py
from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from nextai.config import settings
from nextai.models import Admin, ChatSession, Plan, User
from nextai.services import verification_service as codes
from nextai.services.verification_service import PURPOSE_RESET, PURPOSE_SIGNUP
from nextai.utils.jwt_util import create_token
from nextai.utils.mail_util import send_reset_email, send_verification_email
from nextai.utils.password_util import check_password, hash_password
from nextai.utils.time_util import utcnow
from nextai.utils.validators import (
    is_valid_email,
    missing_fields,
    normalize_email,
    password_error,
    username_error,
)

logger = logging.getLogger(__name__)

KIND_USER = "user"
KIND_ADMIN = "admin"

INVALID_CODE_MESSAGE = "Invalid or expired verification code"
NO_VALID_CODE_MESSAGE = "No valid verification code found. Please request a new code."


def _fail(message: str, status: int = 400, **extra) -> dict:
    return {"success": False, "status": status, "message": message, **extra}


def _with_code(payload: dict, code: str) -> dict:
    if settings.EXPOSE_VERIFICATION_CODES:
        payload["verificationCode"] = code
    return payload


def get_user_by_email(session: Session, email: str) -> User | None:
    return session.query(User).filter(User.email == normalize_email(email)).first()


def get_admin_by_email(session: Session, email: str) -> Admin | None:
    return session.query(Admin).filter(Admin.email == normalize_email(email)).first()


def email_taken(session: Session, email: str, exclude_user_id: str | None = None) -> bool:
    """Email uniqueness spans both account tables."""
    email = normalize_email(email)
    q = session.query(User.id).filter(User.email == email)
    if exclude_user_id:
        q = q.filter(User.id != exclude_user_id)
    if q.first():
        return True
    return session.query(Admin.id).filter(Admin.email == email).first() is not None


def count_chat_sessions(session: Session, user_id: str) -> int:
    return session.query(func.count(ChatSession.id)).filter(ChatSession.user_id == user_id).scalar() or 0


def get_free_plan(session: Session) -> Plan | None:
    return session.query(Plan).filter(Plan.name == settings.FREE_PLAN_NAME).first()


# ---------- signup / email verification ----------

def signup_user(session: Session, data: dict) -> dict:
    missing = missing_fields(data, "email", "username", "password", "confirmPassword")
    if missing:
        return _fail(f"Missing required fields: {', '.join(missing)}")

    email = data["email"]
    username = str(data["username"]).strip()
    password = data["password"]

    if not is_valid_email(email):
        return _fail("Invalid email format")
    msg = username_error(username) or password_error(password)
    if msg:
        return _fail(msg)
    if password != data["confirmPassword"]:
        return _fail("Passwords do not match")

    email = normalize_email(email)
    if email_taken(session, email):
        return _fail("Email already exists", 409)
    if session.query(User.id).filter(User.username == username).first():
        return _fail("Username already exists", 409)

    plan = get_free_plan(session)
    user = User(
        email=email,
        username=username,
        password=hash_password(password),
        plan=plan,
        remaining_tries=plan.tries if plan and not plan.is_unlimited else settings.DEFAULT_FREE_TRIES,
    )
    try:
        session.add(user)
        session.flush()
        record = codes.issue_code(session, user, PURPOSE_SIGNUP, settings.SIGNUP_CODE_TTL_MINUTES)
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.info("signup race on %s / %s", email, username)
        return _fail("Email or username already exists", 409)

    send_verification_email(user.email, record.code)
    logger.info("user %s signed up", user.id)
    return {
        "success": True,
        "status": 201,
        "message": "User registered successfully. Please verify your email.",
        "data": _with_code({"user": user.to_public_dict()}, record.code),
    }


def verify_user_email(session: Session, email: str, code) -> dict:
    user = get_user_by_email(session, email)
    if user is None:
        return _fail("User not found", 404)
    if user.is_verified:
        return {"success": True, "status": 200, "message": "User is already verified"}

    check = codes.validate_code(session, user, code, PURPOSE_SIGNUP)
    if not check.is_valid:
        return _fail(INVALID_CODE_MESSAGE, reason=check.reason, detail=check.message)

    # Flag flip and code consumption commit together
    user.is_verified = True
    codes.consume_code(check.record)
    session.commit()
    logger.info("user %s verified", user.id)
    return {"success": True, "status": 200, "message": "User verified successfully"}


def resend_verification(session: Session, email: str) -> dict:
    user = get_user_by_email(session, email)
    if user is None:
        return _fail("User not found", 404)
    if user.is_verified:
        return _fail("User is already verified")

    record = codes.issue_code(session, user, PURPOSE_SIGNUP, settings.SIGNUP_CODE_TTL_MINUTES)
    session.commit()
    send_verification_email(user.email, record.code)
    return {
        "success": True,
        "status": 200,
        "message": "Verification code resent successfully",
        "data": _with_code({}, record.code),
    }


# ---------- signin ----------

def signin_user(session: Session, email: str, password: str) -> dict:
    user = get_user_by_email(session, email)
    if user is None or not check_password(password, user.password):
        return _fail("Email or password is incorrect")
    if not user.is_verified:
        return _fail("Please verify your email address before signing in", 403,
                     needsVerification=True, email=user.email)
    if user.is_ban:
        return _fail("User is banned", 403)

    user.last_active_at = utcnow()
    session.commit()

    token = create_token(user.id, KIND_USER)
    logger.info("user %s signed in", user.id)
    return {
        "success": True,
        "status": 200,
        "message": "Signed in successfully",
        "data": {
            "user": user.to_public_dict(count_chat_sessions(session, user.id)),
            "token": token,
        },
    }


def signin_admin(session: Session, email: str, password: str) -> dict:
    admin = get_admin_by_email(session, email)
    if admin is None or not check_password(password, admin.password):
        return _fail("Invalid email or password", 401)
    if not admin.is_active:
        return _fail("Admin account is not active", 403)

    token = create_token(admin.id, KIND_ADMIN)
    logger.info("admin %s signed in", admin.id)
    return {
        "success": True,
        "status": 200,
        "message": "Authentication successful",
        "data": {"admin": admin.to_public_dict(), "token": token},
    }


# ---------- password reset (users and admins) ----------

def _find_owner(session: Session, kind: str, email: str):
    if kind == KIND_ADMIN:
        return get_admin_by_email(session, email), "Admin not found"
    return get_user_by_email(session, email), "User not found"


def forgot_password(session: Session, email: str, kind: str = KIND_USER) -> dict:
    owner, not_found = _find_owner(session, kind, email)
    if owner is None:
        return _fail(not_found, 404)
    if kind == KIND_ADMIN and not owner.is_active:
        return _fail("Admin account is not active", 403)

    record = codes.issue_code(session, owner, PURPOSE_RESET, settings.RESET_CODE_TTL_MINUTES)
    session.commit()
    send_reset_email(owner.email, record.code, audience=kind)
    return {
        "success": True,
        "status": 200,
        "message": "Verification code sent successfully",
        "data": _with_code({}, record.code),
    }


def verify_reset_code(session: Session, email: str, code, kind: str = KIND_USER) -> dict:
    """Check a reset code without consuming it."""
    owner, not_found = _find_owner(session, kind, email)
    if owner is None:
        return _fail(not_found, 404)
    check = codes.validate_code(session, owner, code, PURPOSE_RESET)
    if not check.is_valid:
        return _fail(INVALID_CODE_MESSAGE, reason=check.reason, detail=check.message)
    return {"success": True, "status": 200, "message": "Code verified successfully"}


def reset_password(session: Session, data: dict, kind: str = KIND_USER) -> dict:
    missing = missing_fields(data, "email", "code", "password")
    if missing:
        return _fail(f"Missing required fields: {', '.join(missing)}")
    if not is_valid_email(data["email"]):
        return _fail("Invalid email format")
    msg = password_error(data["password"])
    if msg:
        return _fail(msg)
    confirm = data.get("confirmPassword")
    if confirm is not None and confirm != data["password"]:
        return _fail("Passwords do not match")

    owner, not_found = _find_owner(session, kind, data["email"])
    if owner is None:
        return _fail(not_found, 404)

    check = codes.validate_code(session, owner, data["code"], PURPOSE_RESET)
    if not check.is_valid:
        return _fail(NO_VALID_CODE_MESSAGE, reason=check.reason, detail=check.message)

    codes.consume_code(check.record)
    owner.password = hash_password(data["password"])
    session.commit()
    logger.info("%s %s reset password", kind, owner.id)
    return {"success": True, "status": 200, "message": "Password reset successfully"}
