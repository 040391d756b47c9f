# nextai/utils/db_util.py
from flask import g
from sqlalchemy.orm import Session

from nextai.db import get_db_session


def get_request_session() -> Session:
    """One SQLAlchemy session per request, closed by close_request_session."""
    if "db" not in g:
        g.db = get_db_session()
    return g.db


def close_request_session(exc=None) -> None:
    session = g.pop("db", None)
    if session is None:
        return
    if exc is not None:
        session.rollback()
    session.close()
