# nextai/services/admin_service.py
from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from nextai.models import Admin, AiMessage, ChatSession, Contact, User
from nextai.models.admin_model import ADMIN_ROLES, ROLE_ADMIN, ROLE_SUPER_ADMIN
from nextai.services.auth_service import email_taken
from nextai.utils.password_util import hash_password
from nextai.utils.time_util import isoformat_or_none, start_of_day, utcnow
from nextai.utils.validators import (
    is_valid_email,
    missing_fields,
    normalize_email,
    password_error,
    username_error,
)

logger = logging.getLogger(__name__)

RECENT_USERS_LIMIT = 10


def _count(session: Session, column, *criteria) -> int:
    return session.query(func.count(column)).filter(*criteria).scalar() or 0


def _user_row(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "isVerified": user.is_verified,
        "isBan": user.is_ban,
        "remainingTries": user.remaining_tries,
        "planName": user.plan.name if user.plan else "Free",
        "createdAt": isoformat_or_none(user.created_at),
        "updatedAt": isoformat_or_none(user.updated_at),
        "lastActiveAt": isoformat_or_none(user.last_active_at),
    }


def get_dashboard_stats(session: Session, current: Admin) -> dict:
    now = utcnow()
    yesterday = now - timedelta(days=1)

    recent_users = (session.query(User)
                    .order_by(User.created_at.desc())
                    .limit(RECENT_USERS_LIMIT)
                    .all())
    admins = session.query(Admin).order_by(Admin.created_at.desc()).all()

    return {
        "users": {
            "total": _count(session, User.id),
            "verified": _count(session, User.id, User.is_verified.is_(True)),
            "banned": _count(session, User.id, User.is_ban.is_(True)),
            "active": _count(session, User.id, User.is_verified.is_(True), User.is_ban.is_(False)),
            "activeToday": _count(session, User.id, User.last_active_at >= yesterday),
            "recent": [_user_row(u) for u in recent_users],
        },
        "admins": {
            "total": _count(session, Admin.id),
            "active": _count(session, Admin.id, Admin.is_active.is_(True)),
            "superAdmins": _count(session, Admin.id, Admin.role == ROLE_SUPER_ADMIN),
            "regularAdmins": _count(session, Admin.id, Admin.role == ROLE_ADMIN),
            "current": current.to_public_dict(),
            "list": [a.to_public_dict() for a in admins],
        },
        "chat": {
            "totalSessions": _count(session, ChatSession.id),
            "activeSessions": _count(session, ChatSession.id, ChatSession.is_active.is_(True)),
            "totalMessages": _count(session, AiMessage.id),
            "todayMessages": _count(session, AiMessage.id, AiMessage.created_at >= start_of_day(now)),
        },
    }


def create_admin(session: Session, creator: Admin, data: dict) -> dict:
    """Create an admin account; the caller must already be a super admin."""
    missing = missing_fields(data, "username", "email", "password", "role")
    if missing:
        return {"success": False, "status": 400,
                "message": "Username, email, password, and role are required"}

    role = data["role"]
    if role not in ADMIN_ROLES:
        return {"success": False, "status": 400,
                "message": "Invalid role. Must be ADMIN or SUPER_ADMIN"}
    if not is_valid_email(data["email"]):
        return {"success": False, "status": 400, "message": "Invalid email format"}
    msg = password_error(data["password"]) or username_error(data["username"])
    if msg:
        return {"success": False, "status": 400, "message": msg}

    username = data["username"].strip()
    email = normalize_email(data["email"])
    if session.query(Admin.id).filter(Admin.username == username).first():
        return {"success": False, "status": 409, "message": "Username already exists"}
    if email_taken(session, email):
        return {"success": False, "status": 409, "message": "Email already exists"}

    admin = Admin(
        username=username,
        email=email,
        password=hash_password(data["password"]),
        role=role,
        creator=creator,
        is_active=True,
    )
    try:
        session.add(admin)
        session.commit()
    except IntegrityError:
        session.rollback()
        return {"success": False, "status": 409, "message": "Username or email already exists"}

    logger.info("admin %s created by %s with role %s", admin.id, creator.id, role)
    return {
        "success": True,
        "status": 201,
        "message": "Admin created successfully",
        "data": {"admin": admin.to_public_dict()},
    }


def list_contacts(session: Session) -> dict:
    contacts = session.query(Contact).order_by(Contact.created_at.desc()).all()
    rows = [c.to_dict() for c in contacts]
    return {
        "contacts": rows,
        "total": len(rows),
        "unresolved": sum(1 for c in rows if not c["isResolved"]),
    }


def resolve_contact(session: Session, admin: Admin, contact_id: str) -> dict:
    contact = session.get(Contact, contact_id)
    if contact is None:
        return {"success": False, "status": 404, "message": "Contact not found"}
    contact.is_resolved = True
    contact.resolver = admin
    contact.resolved_at = utcnow()
    session.commit()
    return {"success": True, "status": 200, "message": "Contact marked as resolved",
            "data": {"contact": contact.to_dict()}}


def list_users(session: Session) -> dict:
    users = session.query(User).order_by(User.created_at.desc()).all()
    rows = [_user_row(u) for u in users]
    return {"users": rows, "total": len(rows)}


def set_user_ban(session: Session, user_id: str, banned: bool) -> dict:
    user = session.get(User, user_id)
    if user is None:
        return {"success": False, "status": 404, "message": "User not found"}
    user.is_ban = bool(banned)
    session.commit()
    logger.info("user %s ban set to %s", user.id, user.is_ban)
    return {"success": True, "status": 200,
            "message": "User banned" if user.is_ban else "User unbanned",
            "data": {"user": _user_row(user)}}
