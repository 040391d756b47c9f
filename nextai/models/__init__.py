# nextai/models/__init__.py
from nextai.models.plan_model import Plan
from nextai.models.user_model import User
from nextai.models.admin_model import Admin
from nextai.models.verifycode_model import VerificationCode
from nextai.models.chat_model import ChatSession, AiMessage
from nextai.models.friendship_model import Friendship
from nextai.models.contact_model import Contact

__all__ = [
    "Plan", "User", "Admin", "VerificationCode",
    "ChatSession", "AiMessage", "Friendship", "Contact",
]
