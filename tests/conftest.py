"""Pytest configuration and fixtures."""

import os
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from domeal import models  # noqa: F401
from domeal.config import Settings
from domeal.database import Base, get_db
from domeal.main import app
from domeal.models.group import Group, GroupMember
from domeal.models.user import User, UserSession
from domeal.services.auth import generate_session_token
from domeal.services.ocr_service import OCRService, get_ocr_service
from domeal.services.storage_service import StorageService, get_storage_service

# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace("/domeal", "/domeal_test")
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

STORAGE_SETTINGS = {
    "s3_bucket_name": "domeal-receipts",
    "aws_region": "ap-northeast-1",
    "aws_access_key_id": "AKIATESTKEY",
    "aws_secret_access_key": "test-secret",
}


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def storage_service():
    """Storage service signing against a fake bucket (signing is local)."""
    return StorageService(Settings(**STORAGE_SETTINGS))


@pytest.fixture
def ocr_service():
    """OCR adapter replaced by a mock; tests set ``extract`` behaviour."""
    mock = MagicMock(spec=OCRService)
    mock.extract.return_value = '{"items": []}'
    return mock


@pytest.fixture(scope="function")
def client(db, storage_service, ocr_service):
    """Create a test client with database and external service overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_service] = lambda: storage_service
    app.dependency_overrides[get_ocr_service] = lambda: ocr_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Create a user with a live session. Returns ``(user, session_token)``."""

    def _make_user(user_id: int | None = None, name: str = "Test User"):
        user = User(line_sub=f"U{user_id or 'x'}-{generate_session_token()[:8]}", display_name=name)
        if user_id is not None:
            user.id = user_id
        db.add(user)
        db.flush()
        token = generate_session_token()
        db.add(UserSession(user_id=user.id, session_token=token))
        db.commit()
        return user, token

    return _make_user


@pytest.fixture
def make_group(db):
    """Create a group whose members are the given user ids."""

    def _make_group(group_id: int | None, owner_id: int, member_ids: tuple[int, ...] = ()):
        group = Group(name="Dinner", menu="Yakiniku", created_by=owner_id)
        if group_id is not None:
            group.id = group_id
        db.add(group)
        db.flush()
        db.add(GroupMember(group_id=group.id, user_id=owner_id, is_owner=True))
        for member_id in member_ids:
            db.add(GroupMember(group_id=group.id, user_id=member_id, is_owner=False))
        db.commit()
        return group

    return _make_group


@pytest.fixture
def login(client):
    """Point the test client's session cookie at a given token."""

    def _login(token: str) -> None:
        client.cookies.set("session_id", token)

    return _login
