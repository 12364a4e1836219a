from collections.abc import Generator
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import get_settings

Base = declarative_base()

_engine = None
_SessionLocal = None


def get_engine(url: Optional[str] = None):
    global _engine
    if _engine is None:
        url = url or get_settings().database_url
        connect_args = {}
        if url.startswith("sqlite"):
            # sync endpoints run in a threadpool
            connect_args["check_same_thread"] = False
        _engine = create_engine(url, future=True, connect_args=connect_args)
    return _engine


def get_session_factory():
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(bind=get_engine(), autoflush=False, autocommit=False, expire_on_commit=False)
    return _SessionLocal


def get_session() -> Generator:
    session = get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db() -> None:
    # entities must be imported so their tables are registered on Base.metadata
    from . import entities  # noqa: F401

    engine = get_engine()
    Base.metadata.create_all(bind=engine)
