# nextai/models/chat_model.py
import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.mysql import DATETIME as MySQLDateTime
from sqlalchemy.orm import relationship

from nextai.db import Base
from nextai.utils.time_util import isoformat_or_none, utcnow

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
MESSAGE_ROLES = (ROLE_USER, ROLE_ASSISTANT)


class ChatSession(Base):
    __tablename__ = "chat_sessions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False, default="New Chat")
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="chat_sessions")
    messages = relationship(
        "AiMessage", back_populates="session",
        cascade="all, delete-orphan", order_by="AiMessage.created_at"
    )

    def to_dict(self, with_messages: bool = True) -> dict:
        data = {
            "id": self.id,
            "title": self.title,
            "userId": self.user_id,
            "isActive": self.is_active,
            "createdAt": isoformat_or_none(self.created_at),
            "updatedAt": isoformat_or_none(self.updated_at),
        }
        if with_messages:
            data["messages"] = [m.to_dict() for m in self.messages]
        return data


class AiMessage(Base):
    __tablename__ = "ai_messages"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    session_id = Column(String(36), ForeignKey("chat_sessions.id", ondelete="CASCADE"),
                        nullable=False, index=True)
    role = Column(String(20), nullable=False)
    content = Column(Text, nullable=False)
    image_url = Column(String(1024), nullable=True)
    message_type = Column(String(10), nullable=False, default="TEXT")
    # Microsecond precision on MySQL keeps a question ahead of its answer
    created_at = Column(DateTime().with_variant(MySQLDateTime(fsp=6), "mysql"),
                        nullable=False, default=utcnow, index=True)

    session = relationship("ChatSession", back_populates="messages")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sessionId": self.session_id,
            "role": self.role,
            "content": self.content,
            "imageUrl": self.image_url,
            "messageType": self.message_type,
            "createdAt": isoformat_or_none(self.created_at),
        }
