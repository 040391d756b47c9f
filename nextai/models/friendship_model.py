# nextai/models/friendship_model.py
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from nextai.db import Base
from nextai.utils.time_util import isoformat_or_none, utcnow

STATUS_PENDING = "PENDING"
STATUS_ACCEPTED = "ACCEPTED"
STATUS_REJECTED = "REJECTED"


class Friendship(Base):
    __tablename__ = "friendships"
    __table_args__ = (UniqueConstraint("requester_id", "receiver_id", name="uq_friendship_pair"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    requester_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    receiver_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), nullable=False, default=STATUS_PENDING)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    requester = relationship("User", foreign_keys=[requester_id], back_populates="sent_requests")
    receiver = relationship("User", foreign_keys=[receiver_id], back_populates="received_requests")

    def other_party(self, user_id: str):
        return self.receiver if self.requester_id == user_id else self.requester

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "requesterId": self.requester_id,
            "receiverId": self.receiver_id,
            "status": self.status,
            "createdAt": isoformat_or_none(self.created_at),
            "updatedAt": isoformat_or_none(self.updated_at),
        }
