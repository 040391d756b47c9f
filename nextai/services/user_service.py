# nextai/services/user_service.py
from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from nextai.config import settings
from nextai.models import AiMessage, ChatSession, Plan, User
from nextai.services.auth_service import count_chat_sessions, email_taken
from nextai.utils.password_util import check_password, hash_password
from nextai.utils.time_util import start_of_day, utcnow
from nextai.utils.validators import (
    is_valid_email,
    normalize_email,
    password_error,
    text_field,
    username_error,
)

logger = logging.getLogger(__name__)


def get_user_profile(session: Session, user: User) -> dict:
    return user.to_public_dict(count_chat_sessions(session, user.id))


def update_user_profile(session: Session, user: User, data: dict) -> dict:
    username = text_field(data, "username")
    email = text_field(data, "email")
    if not username or not email:
        return {"success": False, "status": 400, "message": "Username and email are required"}
    msg = username_error(username)
    if msg:
        return {"success": False, "status": 400, "message": msg}
    if not is_valid_email(email):
        return {"success": False, "status": 400, "message": "Invalid email format"}

    email = normalize_email(email)
    taken_username = (session.query(User.id)
                      .filter(User.username == username, User.id != user.id)
                      .first())
    if taken_username:
        return {"success": False, "status": 400, "message": "Username already taken"}
    if email_taken(session, email, exclude_user_id=user.id):
        return {"success": False, "status": 400, "message": "Email already in use"}

    user.username = username
    user.email = email
    session.commit()
    logger.info("user %s updated profile", user.id)
    return {
        "success": True,
        "status": 200,
        "message": "Profile updated successfully",
        "data": {"user": get_user_profile(session, user)},
    }


def change_password(session: Session, user: User, data: dict) -> dict:
    current, new = data.get("currentPassword"), data.get("newPassword")
    if not isinstance(current, str) or not isinstance(new, str) or not current or not new:
        return {"success": False, "status": 400,
                "message": "Current password and new password are required"}
    msg = password_error(new)
    if msg:
        return {"success": False, "status": 400, "message": msg}
    if current == new:
        return {"success": False, "status": 400,
                "message": "New password must be different from current password"}
    if not check_password(current, user.password):
        return {"success": False, "status": 400, "message": "Current password is incorrect"}

    user.password = hash_password(new)
    session.commit()
    logger.info("user %s changed password", user.id)
    return {"success": True, "status": 200, "message": "Password updated successfully"}


def delete_account(session: Session, user: User) -> dict:
    user_id = user.id
    # Sessions, messages, codes and friendships cascade; contacts keep the row
    session.delete(user)
    session.commit()
    logger.info("user %s deleted their account", user_id)
    return {"success": True, "status": 200, "message": "Account deleted successfully"}


def update_plan(session: Session, user: User, plan_id: str | None) -> dict:
    if not isinstance(plan_id, str) or not plan_id:
        return {"success": False, "status": 400, "message": "Plan ID is required"}
    plan = session.get(Plan, plan_id)
    if plan is None:
        return {"success": False, "status": 404, "message": "Plan not found"}

    user.plan = plan
    user.remaining_tries = settings.UNLIMITED_TRIES if plan.is_unlimited else plan.tries
    session.commit()
    logger.info("user %s switched to plan %s", user.id, plan.name)
    return {
        "success": True,
        "status": 200,
        "message": "Plan updated successfully",
        "data": {"user": get_user_profile(session, user)},
    }


def _message_count(session: Session, user_id: str, since=None) -> int:
    q = (session.query(func.count(AiMessage.id))
         .join(ChatSession, AiMessage.session_id == ChatSession.id)
         .filter(ChatSession.user_id == user_id))
    if since is not None:
        q = q.filter(AiMessage.created_at >= since)
    return q.scalar() or 0


def get_usage_stats(session: Session, user: User) -> dict:
    now = utcnow()
    today = start_of_day(now)
    seven_days_ago = today - timedelta(days=6)
    thirty_days_ago = now - timedelta(days=30)

    recent_created = (session.query(AiMessage.created_at)
                      .join(ChatSession, AiMessage.session_id == ChatSession.id)
                      .filter(ChatSession.user_id == user.id,
                              AiMessage.created_at >= seven_days_ago)
                      .all())
    per_day: dict[str, int] = {}
    for (created_at,) in recent_created:
        key = created_at.date().isoformat()
        per_day[key] = per_day.get(key, 0) + 1

    chart_data = []
    for i in range(6, -1, -1):
        day = today - timedelta(days=i)
        key = day.date().isoformat()
        chart_data.append({"date": key, "messages": per_day.get(key, 0), "day": day.strftime("%a")})

    recent_messages = _message_count(session, user.id, thirty_days_ago)
    recent_sessions = (session.query(func.count(ChatSession.id))
                       .filter(ChatSession.user_id == user.id,
                               ChatSession.created_at >= thirty_days_ago)
                       .scalar() or 0)

    return {
        "totalChatSessions": count_chat_sessions(session, user.id),
        "totalMessages": _message_count(session, user.id),
        "recentMessages": recent_messages,
        "recentSessions": recent_sessions,
        "todayMessages": _message_count(session, user.id, today),
        "remainingTries": user.remaining_tries,
        "planName": user.plan_name,
        "chartData": chart_data,
        "usageThisMonth": recent_messages,
        "averageDaily": round(recent_messages / 30),
    }
