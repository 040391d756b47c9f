# nextai/models/verifycode_model.py
import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, String
from sqlalchemy.dialects.mysql import DATETIME as MySQLDateTime
from sqlalchemy.orm import relationship

from nextai.db import Base
from nextai.utils.time_util import utcnow

PURPOSE_SIGNUP = "signup"
PURPOSE_RESET = "reset"


class VerificationCode(Base):
    __tablename__ = "verification_codes"
    __table_args__ = (
        CheckConstraint(
            "(user_id IS NULL) <> (admin_id IS NULL)",
            name="ck_verification_codes_single_owner",
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    code = Column(String(6), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    admin_id = Column(String(36), ForeignKey("admins.id", ondelete="CASCADE"), nullable=True)
    purpose = Column(String(20), nullable=False, default=PURPOSE_SIGNUP)
    expires_at = Column(DateTime, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    is_used = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime().with_variant(MySQLDateTime(fsp=6), "mysql"), nullable=False,
                        default=utcnow)

    user = relationship("User", back_populates="verification_codes")
    admin = relationship("Admin", back_populates="verification_codes")

    def is_expired(self, now=None) -> bool:
        return (now or utcnow()) >= self.expires_at
