import os
import tempfile

# Set environment variables BEFORE any imports that might use settings
_test_db_dir = tempfile.mkdtemp()
_test_db_path = os.path.join(_test_db_dir, "test_aktywni.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_test_db_path}"
os.environ["SECRET_KEY"] = "test-secret-key-min-32-characters-long-for-testing"
os.environ["ALGORITHM"] = "HS256"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "30"
os.environ["FIRST_ADMIN_EMAIL"] = "admin@test.example.com"
os.environ["FIRST_ADMIN_PASSWORD"] = "AdminTest123!"
os.environ["RESET_TOKEN_IN_RESPONSE"] = "false"

import pytest
from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from aktywni.main import app
from aktywni.core.config import settings
from aktywni.core.security import create_access_token
from aktywni.db.models.user import User as UserModel
from aktywni.domain.credentials import hash_credential


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test and run migrations."""
    temp_db_dir = tempfile.mkdtemp()
    test_db_path = os.path.join(temp_db_dir, "test.db")
    test_db_url = f"sqlite:///{test_db_path}"

    test_engine = create_engine(
        test_db_url,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(test_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=test_engine
    )

    # Run Alembic migrations to set up the database schema and seed data
    alembic_cfg = Config("alembic.ini")
    alembic_cfg.set_main_option("sqlalchemy.url", test_db_url)
    command.upgrade(alembic_cfg, "head")

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        test_engine.dispose()

        try:
            for suffix in ["", "-wal", "-shm"]:
                path = f"{test_db_path}{suffix}"
                if os.path.exists(path):
                    os.remove(path)
            if os.path.exists(temp_db_dir):
                os.rmdir(temp_db_dir)
        except OSError as e:
            print(f"Cleanup failed: {e}")


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database dependency override."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    from aktywni.api.deps import get_db

    app.dependency_overrides[get_db] = override_get_db

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def db(db_session):
    """Alias for db_session to match test naming conventions."""
    return db_session


@pytest.fixture(scope="function")
def debug_reset_tokens(monkeypatch):
    """Echo raw reset tokens in the forgot-password response."""
    monkeypatch.setattr(settings, "reset_token_in_response", True)


@pytest.fixture(scope="function")
def admin_user(db: Session) -> dict:
    """The admin user seeded by migration 001."""
    from aktywni.repositories.user import get_user_by_email

    user = get_user_by_email(db, settings.first_admin_email)
    if not user:
        raise RuntimeError("Admin user not found. Check migration 001.")

    return {
        "id": user.id,
        "email": user.email,
        "password": settings.first_admin_password,
        "role": user.role,
    }


@pytest.fixture(scope="function")
def admin_token(admin_user: dict) -> str:
    return create_access_token(data={"sub": str(admin_user["id"])})


def make_user(db: Session, email: str, password: str) -> dict:
    user = UserModel(email=email, credential=hash_credential(password), role="user")
    db.add(user)
    db.commit()
    db.refresh(user)
    return {"id": user.id, "email": user.email, "password": password, "role": user.role}


@pytest.fixture(scope="function")
def regular_user(db: Session) -> dict:
    """Create a regular user for testing."""
    return make_user(db, "runner@example.com", "RunnerPass1")


@pytest.fixture(scope="function")
def user_token(regular_user: dict) -> str:
    return create_access_token(data={"sub": str(regular_user["id"])})


@pytest.fixture(scope="function")
def other_user(db: Session) -> dict:
    return make_user(db, "cyclist@example.com", "CyclistPass1")


@pytest.fixture(scope="function")
def other_token(other_user: dict) -> str:
    return create_access_token(data={"sub": str(other_user["id"])})
