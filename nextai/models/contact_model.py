# nextai/models/contact_model.py
import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from nextai.db import Base
from nextai.utils.time_util import isoformat_or_none, utcnow


class Contact(Base):
    __tablename__ = "contacts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    username = Column(String(100), nullable=False, default="")
    email = Column(String(255), nullable=False)
    subject = Column(String(255), nullable=False, default="")
    message = Column(Text, nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    is_resolved = Column(Boolean, nullable=False, default=False)
    resolved_by = Column(String(36), ForeignKey("admins.id", ondelete="SET NULL"), nullable=True)
    resolved_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="contacts")
    resolver = relationship("Admin")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "username": self.username,
            "email": self.email,
            "subject": self.subject,
            "message": self.message,
            "isResolved": self.is_resolved,
            "createdAt": isoformat_or_none(self.created_at),
            "updatedAt": isoformat_or_none(self.updated_at),
            "resolvedAt": isoformat_or_none(self.resolved_at),
            "user": (
                {"id": self.user.id, "username": self.user.username, "email": self.user.email}
                if self.user else None
            ),
            "resolver": (
                {"id": self.resolver.id, "username": self.resolver.username}
                if self.resolver else None
            ),
        }
