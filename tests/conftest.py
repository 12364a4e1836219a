import os
import tempfile
from pathlib import Path

import httpx
import pytest
from sqlalchemy import delete
from sqlalchemy.orm import sessionmaker

os.environ.setdefault("APP_DATABASE_URL", f"sqlite:///{Path(tempfile.mkdtemp()) / 'library-test.db'}")
os.environ.setdefault("APP_SEED_SAMPLE_DATA", "false")

from library_backend.app import app, get_book_service  # noqa: E402
from library_backend.db import Base, get_engine, get_session  # noqa: E402
from library_backend.entities import BookRecord  # noqa: E402
from library_backend.service import BookService  # noqa: E402


@pytest.fixture(scope="session")
def engine():
    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session(engine):
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    session = Session()
    session.execute(delete(BookRecord))
    session.commit()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture()
def overrides(db_session):
    def _get_test_session():
        try:
            yield db_session
        finally:
            db_session.rollback()

    app.dependency_overrides[get_session] = _get_test_session
    app.dependency_overrides[get_book_service] = lambda: BookService(db_session)
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(overrides):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"
