# nextai/models/user_model.py
import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from nextai.db import Base
from nextai.utils.time_util import isoformat_or_none, utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(100), unique=True, nullable=False)
    password = Column(String(255), nullable=False)
    is_verified = Column(Boolean, nullable=False, default=False)
    is_ban = Column(Boolean, nullable=False, default=False)
    remaining_tries = Column(Integer, nullable=False, default=50)
    plan_id = Column(String(36), ForeignKey("plans.id", ondelete="SET NULL"), nullable=True)
    last_active_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    plan = relationship("Plan", back_populates="users", lazy="joined")
    chat_sessions = relationship(
        "ChatSession", back_populates="user", cascade="all, delete-orphan"
    )
    verification_codes = relationship(
        "VerificationCode", back_populates="user", cascade="all, delete-orphan"
    )
    sent_requests = relationship(
        "Friendship", foreign_keys="Friendship.requester_id",
        back_populates="requester", cascade="all, delete-orphan"
    )
    received_requests = relationship(
        "Friendship", foreign_keys="Friendship.receiver_id",
        back_populates="receiver", cascade="all, delete-orphan"
    )
    contacts = relationship("Contact", back_populates="user")

    kind = "user"

    @property
    def plan_name(self) -> str:
        return self.plan.name if self.plan else "free"

    def to_public_dict(self, chat_sessions_count: int | None = None) -> dict:
        """Serializable view without the password hash."""
        data = {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "isVerified": self.is_verified,
            "isBan": self.is_ban,
            "remainingTries": self.remaining_tries,
            "planId": self.plan_id,
            "plan": self.plan.to_dict() if self.plan else None,
            "lastActiveAt": isoformat_or_none(self.last_active_at),
            "createdAt": isoformat_or_none(self.created_at),
            "updatedAt": isoformat_or_none(self.updated_at),
        }
        if chat_sessions_count is not None:
            data["_count"] = {"chatSessions": chat_sessions_count}
        return data
