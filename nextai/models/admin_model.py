# nextai/models/admin_model.py
import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from nextai.db import Base
from nextai.utils.time_util import isoformat_or_none, utcnow

ROLE_ADMIN = "ADMIN"
ROLE_SUPER_ADMIN = "SUPER_ADMIN"
ADMIN_ROLES = (ROLE_ADMIN, ROLE_SUPER_ADMIN)


class Admin(Base):
    __tablename__ = "admins"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(100), unique=True, nullable=False)
    password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=ROLE_ADMIN)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(String(36), ForeignKey("admins.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    creator = relationship("Admin", remote_side=[id])
    verification_codes = relationship(
        "VerificationCode", back_populates="admin", cascade="all, delete-orphan"
    )

    kind = "admin"

    @property
    def is_super_admin(self) -> bool:
        return self.role == ROLE_SUPER_ADMIN

    def to_public_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "role": self.role,
            "isActive": self.is_active,
            "createdBy": self.created_by,
            "creator": {"username": self.creator.username} if self.creator else None,
            "createdAt": isoformat_or_none(self.created_at),
        }
