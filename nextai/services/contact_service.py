# nextai/services/contact_service.py
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from nextai.models import Contact, User
from nextai.utils.validators import is_valid_email, normalize_email, text_field

logger = logging.getLogger(__name__)


def submit_contact(session: Session, data: dict, user_id: str | None = None) -> dict:
    username = text_field(data, "username")
    email = text_field(data, "email")
    message = text_field(data, "message")
    if not username or not email or not message:
        return {"success": False, "status": 400,
                "message": "Username, email, and message are required"}
    if not is_valid_email(email):
        return {"success": False, "status": 400, "message": "Invalid email format"}

    # A token for a deleted account should not break the form
    if user_id and session.get(User, user_id) is None:
        user_id = None

    contact = Contact(
        name=username,
        username=username,
        email=normalize_email(email),
        subject=text_field(data, "subject") or "",
        message=message,
        user_id=user_id,
    )
    session.add(contact)
    session.commit()
    logger.info("contact %s submitted (user=%s)", contact.id, user_id)
    return {"success": True, "status": 201,
            "message": "Contact request submitted successfully",
            "contactId": contact.id}
