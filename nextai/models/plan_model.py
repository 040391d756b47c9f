# nextai/models/plan_model.py
import uuid

from sqlalchemy import Column, DateTime, Float, Integer, String
from sqlalchemy.orm import relationship

from nextai.db import Base
from nextai.utils.time_util import utcnow

UNLIMITED = -1


class Plan(Base):
    __tablename__ = "plans"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(50), unique=True, nullable=False)
    # -1 means unlimited
    tries = Column(Integer, nullable=False, default=0)
    price = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    users = relationship("User", back_populates="plan")

    @property
    def is_unlimited(self) -> bool:
        return self.tries == UNLIMITED

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "tries": self.tries, "price": self.price}
