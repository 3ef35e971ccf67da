import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("S3_BUCKET_NAME", "test-bucket")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

import pytest
import uuid
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient
from app.core.config import settings
from app.core.constants import RoleEnum
from app.core.database import Base
from app.core.security import create_access_token
from app.crud.user import user as crud_user
from app.utils import deps as deps_utils
import main

test_db_url = settings.TEST_DATABASE_URL or settings.DATABASE_URL

@pytest.fixture(scope="session")
def database_engine():
    if test_db_url.startswith("sqlite"):
        engine = create_engine(test_db_url, connect_args={"check_same_thread": False})
    else:
        engine = create_engine(test_db_url)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if test_db_url == "sqlite:///./test.db" and os.path.exists("./test.db"):
        os.remove("./test.db")

@pytest.fixture(scope="function")
def db_session(database_engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=database_engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        # Services commit eagerly, so wipe rows instead of relying on a rollback
        db.rollback()
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()
        db.close()

@pytest.fixture(scope="function")
def client(db_session):
    main.app.dependency_overrides[deps_utils.get_db] = lambda: db_session
    main.app.dependency_overrides[deps_utils.get_transactional_db] = lambda: db_session
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()

@pytest.fixture
def user_factory(db_session):
    def _user_factory(role: str, email: str = None, full_name: str = None, is_active: bool = True):
        role_enum = RoleEnum(role)
        return crud_user.create_with_role(
            db_session,
            full_name=full_name or f"Test {role_enum.value}",
            email=email or f"{role_enum.value}-{uuid.uuid4()}@test.com",
            role=role_enum,
            is_active=is_active,
        )
    return _user_factory

@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        token = create_access_token({"user_id": user.id}, user.email)
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers

@pytest.fixture
def token_for_role(user_factory):
    """One user per role per test; returns that user's bearer token."""
    tokens = {}

    def _create_token_for_role(role_name: str):
        if role_name in tokens:
            return tokens[role_name]
        user = user_factory(role_name)
        tokens[role_name] = create_access_token({"user_id": user.id}, user.email)
        return tokens[role_name]

    return _create_token_for_role
