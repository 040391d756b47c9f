# nextai/services/plan_service.py
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from nextai.config import settings
from nextai.models import Admin, Plan
from nextai.models.admin_model import ROLE_SUPER_ADMIN
from nextai.models.plan_model import UNLIMITED
from nextai.utils.password_util import hash_password

logger = logging.getLogger(__name__)

DEFAULT_PLANS = (
    {"name": "free", "tries": 50, "price": 0.0},
    {"name": "pro", "tries": 500, "price": 9.99},
    {"name": "premium", "tries": UNLIMITED, "price": 19.99},
)


def list_plans(session: Session) -> list[dict]:
    return [p.to_dict() for p in session.query(Plan).order_by(Plan.price.asc()).all()]


def seed_plans(session: Session) -> list[str]:
    """Create missing default plans; returns the names created."""
    created = []
    for plan in DEFAULT_PLANS:
        if session.query(Plan.id).filter(Plan.name == plan["name"]).first():
            logger.info('plan "%s" already exists', plan["name"])
            continue
        session.add(Plan(**plan))
        created.append(plan["name"])
    session.commit()
    for name in created:
        logger.info('plan "%s" created', name)
    return created


def seed_super_admin(session: Session) -> Admin | None:
    """Create the configured super admin unless that username exists already."""
    username = settings.SUPER_ADMIN_USERNAME
    if session.query(Admin.id).filter(Admin.username == username).first():
        logger.info("super admin %s already exists", username)
        return None
    admin = Admin(
        username=username,
        email=settings.SUPER_ADMIN_EMAIL.strip().lower(),
        password=hash_password(settings.SUPER_ADMIN_PASSWORD),
        role=ROLE_SUPER_ADMIN,
        is_active=True,
    )
    session.add(admin)
    session.commit()
    logger.info("super admin %s created", username)
    return admin
