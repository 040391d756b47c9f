# nextai/services/chat_service.py
from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy.orm import Session

from nextai.config import settings
from nextai.errors import LLMError
from nextai.models import AiMessage, ChatSession, User
from nextai.models.chat_model import MESSAGE_ROLES, ROLE_ASSISTANT, ROLE_USER
from nextai.services import llm_service
from nextai.utils.time_util import utcnow

logger = logging.getLogger(__name__)

TITLE_LENGTH = 50
UPGRADE_MESSAGE = "No remaining tries. Please upgrade your plan."


def is_free_tier(user: User) -> bool:
    # Accounts without a plan are billed as free
    return user.plan is None or user.plan.name == settings.FREE_PLAN_NAME


def credits_exhausted(user: User) -> bool:
    return is_free_tier(user) and user.remaining_tries <= 0


def _needs_upgrade() -> dict:
    return {"success": False, "status": 403, "message": UPGRADE_MESSAGE, "needsUpgrade": True}


def _title_from(content: str) -> str:
    return content[:TITLE_LENGTH] + ("..." if len(content) > TITLE_LENGTH else "")


def get_owned_session(session: Session, user: User, session_id: str, active_only: bool = True):
    q = session.query(ChatSession).filter(ChatSession.id == session_id,
                                          ChatSession.user_id == user.id)
    if active_only:
        q = q.filter(ChatSession.is_active.is_(True))
    return q.first()


def list_sessions(session: Session, user: User) -> list[dict]:
    rows = (session.query(ChatSession)
            .filter(ChatSession.user_id == user.id, ChatSession.is_active.is_(True))
            .order_by(ChatSession.updated_at.desc())
            .all())
    return [r.to_dict() for r in rows]


def create_session(session: Session, user: User, title: str | None = None) -> dict:
    if credits_exhausted(user):
        return _needs_upgrade()
    title = title.strip() if isinstance(title, str) else ""
    chat = ChatSession(title=title or "New Chat", user_id=user.id)
    session.add(chat)
    session.commit()
    return {"success": True, "status": 201, "session": chat.to_dict()}


def delete_session(session: Session, user: User, session_id: str) -> dict:
    if not isinstance(session_id, str) or not session_id:
        return {"success": False, "status": 400, "message": "Session ID is required"}
    chat = get_owned_session(session, user, session_id, active_only=False)
    if chat is None:
        return {"success": False, "status": 404, "message": "Session not found"}
    # Soft delete
    chat.is_active = False
    session.commit()
    return {"success": True, "status": 200, "message": "Session deleted successfully"}


def _is_first_user_message(session: Session, chat: ChatSession) -> bool:
    return not session.query(AiMessage.id).filter(
        AiMessage.session_id == chat.id, AiMessage.role == ROLE_USER
    ).first()


def add_message(session: Session, user: User, data: dict) -> dict:
    """Store one message as-is, without calling the model."""
    session_id, content, role = data.get("sessionId"), data.get("content"), data.get("role")
    if not isinstance(session_id, str) or not isinstance(content, str) \
            or not session_id or not content.strip() or not role:
        return {"success": False, "status": 400,
                "message": "Session ID, content, and role are required"}
    if role not in MESSAGE_ROLES:
        return {"success": False, "status": 400, "message": "Invalid role"}

    chat = get_owned_session(session, user, session_id)
    if chat is None:
        return {"success": False, "status": 404, "message": "Session not found"}

    if role == ROLE_USER and _is_first_user_message(session, chat):
        chat.title = _title_from(content)

    image_url = data.get("imageUrl")
    image_url = image_url if isinstance(image_url, str) and image_url else None
    message = AiMessage(
        session_id=chat.id,
        role=role,
        content=content,
        image_url=image_url,
        message_type="IMAGE" if image_url else "TEXT",
    )
    session.add(message)
    chat.updated_at = utcnow()
    session.commit()
    return {"success": True, "status": 201, "data": {"message": message.to_dict()}}


def generate_reply(session: Session, user: User, session_id: str, text: str) -> dict:
    """Ask the model, then store the question, the answer and the credit charge in one commit."""
    text = text.strip() if isinstance(text, str) else ""
    if not isinstance(session_id, str) or not session_id:
        return {"success": False, "status": 400, "message": "Session ID is required"}
    if not text:
        return {"success": False, "status": 400, "message": "Message is required"}

    chat = get_owned_session(session, user, session_id)
    if chat is None:
        return {"success": False, "status": 404, "message": "Session not found"}
    if credits_exhausted(user):
        return _needs_upgrade()

    history = chat.messages[-settings.CHAT_CONTEXT_MESSAGES:] if settings.CHAT_CONTEXT_MESSAGES else []
    prompt = llm_service.build_prompt(history, text)
    try:
        answer = llm_service.generate_text(prompt)
    except LLMError as e:
        logger.warning("generation failed for session %s: %s (%s)", chat.id, e.message, e.kind)
        return {"success": False, "status": e.status_code, "message": e.message}

    now = utcnow()
    if _is_first_user_message(session, chat):
        chat.title = _title_from(text)
    question = AiMessage(session_id=chat.id, role=ROLE_USER, content=text, created_at=now)
    reply = AiMessage(session_id=chat.id, role=ROLE_ASSISTANT, content=answer,
                      created_at=now + timedelta(microseconds=1))
    session.add_all([question, reply])
    chat.updated_at = now
    user.last_active_at = now
    if is_free_tier(user):
        # Decrement in SQL so concurrent requests cannot lose a charge
        user.remaining_tries = User.remaining_tries - 1

    try:
        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(user)
    logger.info("session %s: reply stored, user %s has %s tries left",
                chat.id, user.id, user.remaining_tries)
    return {
        "success": True,
        "status": 201,
        "data": {
            "userMessage": question.to_dict(),
            "aiMessage": reply.to_dict(),
            "remainingTries": user.remaining_tries,
        },
    }
