# nextai/db.py
from __future__ import annotations

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from nextai.config import settings

DATABASE_URL = settings.DATABASE_URL


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # Flask serves requests on worker threads
        return {"connect_args": {"check_same_thread": False}, "future": True}
    # pool_pre_ping and pool_recycle avoid MySQL wait_timeout disconnects
    return {"pool_pre_ping": True, "pool_recycle": 1800, "future": True}


engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))

# Session & Base
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True,
                            expire_on_commit=False)
Base = declarative_base()


# Create and return a new database session
def get_db_session() -> Session:
    return SessionLocal()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Usage:
        with session_scope() as s:
            s.add(obj)
    commits on success, rolls back on error, always closes.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db() -> None:
    # Import models so every table is registered on Base.metadata
    import nextai.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def drop_db() -> None:
    import nextai.models  # noqa: F401

    Base.metadata.drop_all(bind=engine)


if __name__ == "__main__":
    print(f"Connection string: {DATABASE_URL}")
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("Database connection OK")
    except Exception as e:
        print("Database connection failed:", e)
