import pytest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import aktywni.repositories.user as user_repo
from aktywni.domain.credentials import hash_credential
from aktywni.errors import DuplicateResourceError


def insert_legacy_user(db: Session, email: str, password: str) -> int:
    """Insert a user the way the old service did: plaintext in the credential column."""
    db.execute(
        text("INSERT INTO users (email, credential, role) VALUES (:email, :credential, 'user')"),
        {"email": email, "credential": password},
    )
    db.commit()
    return db.execute(
        text("SELECT id FROM users WHERE email = :email"), {"email": email}
    ).scalar_one()


def raw_credential(db: Session, email: str) -> str:
    return db.execute(
        text("SELECT credential FROM users WHERE email = :email"), {"email": email}
    ).scalar_one()


# ============================================================================
# REGISTER TESTS
# ============================================================================


def test_register_success(client, db: Session):
    """Test registration creates a user with role "user" and returns a token."""
    response = client.post(
        "/api/register",
        json={
            "email": "newuser@example.com",
            "password": "password1",
            "confirmPassword": "password1",
        },
    )
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "newuser@example.com"
    assert data["role"] == "user"
    assert isinstance(data["id"], int)
    assert data["token"]
    assert "credential" not in data


def test_register_stores_hashed_credential(client, db: Session):
    """Test registration never stores the plaintext password."""
    client.post(
        "/api/register",
        json={
            "email": "newuser@example.com",
            "password": "password1",
            "confirmPassword": "password1",
        },
    )
    stored = raw_credential(db, "newuser@example.com")
    assert stored != "password1"
    assert stored.startswith("$2")


def test_register_normalizes_email(client, db: Session):
    """Test registration trims and lowercases the email."""
    response = client.post(
        "/api/register",
        json={
            "email": "  NewUser@Example.COM ",
            "password": "password1",
            "confirmPassword": "password1",
        },
    )
    assert response.status_code == 201
    assert response.json()["email"] == "newuser@example.com"


def test_register_token_authenticates(client, db: Session):
    """Test the returned token opens a session."""
    response = client.post(
        "/api/register",
        json={
            "email": "newuser@example.com",
            "password": "password1",
            "confirmPassword": "password1",
        },
    )
    token = response.json()["token"]
    me = client.get("/api/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "newuser@example.com"


def test_register_invalid_email(client, db: Session):
    response = client.post(
        "/api/register",
        json={"email": "not-an-email", "password": "password1", "confirmPassword": "password1"},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_register_missing_fields(client, db: Session):
    response = client.post("/api/register", json={"email": "newuser@example.com"})
    assert response.status_code == 400


def test_register_password_too_short(client, db: Session):
    response = client.post(
        "/api/register",
        json={"email": "newuser@example.com", "password": "short1", "confirmPassword": "short1"},
    )
    assert response.status_code == 400
    assert "at least 8 characters" in response.json()["detail"]


def test_register_password_mismatch(client, db: Session):
    response = client.post(
        "/api/register",
        json={
            "email": "newuser@example.com",
            "password": "password1",
            "confirmPassword": "password2",
        },
    )
    assert response.status_code == 400
    assert "do not match" in response.json()["detail"]


def test_register_email_already_exists(client, db: Session, regular_user: dict):
    response = client.post(
        "/api/register",
        json={
            "email": regular_user["email"].upper(),
            "password": "password1",
            "confirmPassword": "password1",
        },
    )
    assert response.status_code == 409
    assert response.json()["detail"] == "Email already registered"
    assert response.json()["code"] == "DUPLICATE_RESOURCE"


def test_register_race_on_unique_index(client, db: Session, regular_user: dict, monkeypatch):
    """Test a registration that slips past the pre-check is still rejected by the index."""
    monkeypatch.setattr(user_repo, "get_user_by_email", lambda db, email: None)
    response = client.post(
        "/api/register",
        json={
            "email": regular_user["email"],
            "password": "password1",
            "confirmPassword": "password1",
        },
    )
    assert response.status_code == 409
    assert response.json()["detail"] == "Email already registered"


def test_create_user_translates_integrity_error(db: Session, regular_user: dict):
    with pytest.raises(DuplicateResourceError):
        user_repo.create_user(db, regular_user["email"], hash_credential("whatever1"))
    # Session is usable after the rollback
    assert user_repo.get_user_by_email(db, regular_user["email"]) is not None


# ============================================================================
# LOGIN TESTS
# ============================================================================


def test_login_success(client, db: Session, regular_user: dict):
    """Test successful login returns identity and bearer token."""
    response = client.post(
        "/api/login",
        json={"email": regular_user["email"], "password": regular_user["password"]},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == regular_user["id"]
    assert data["email"] == regular_user["email"]
    assert data["role"] == "user"
    assert data["token"]


def test_login_admin(client, db: Session, admin_user: dict):
    response = client.post(
        "/api/login",
        json={"email": admin_user["email"], "password": admin_user["password"]},
    )
    assert response.status_code == 200
    assert response.json()["role"] == "admin"


def test_login_email_is_normalized(client, db: Session, regular_user: dict):
    response = client.post(
        "/api/login",
        json={"email": "  RUNNER@example.com", "password": regular_user["password"]},
    )
    assert response.status_code == 200


def test_login_wrong_password(client, db: Session, regular_user: dict):
    response = client.post(
        "/api/login",
        json={"email": regular_user["email"], "password": "wrong"},
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_login_unknown_email_matches_wrong_password(client, db: Session, regular_user: dict):
    """Test unknown email and wrong password are indistinguishable."""
    unknown = client.post(
        "/api/login",
        json={"email": "nobody@example.com", "password": "whatever1"},
    )
    wrong = client.post(
        "/api/login",
        json={"email": regular_user["email"], "password": "whatever1"},
    )
    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json()


@pytest.mark.parametrize(
    "body",
    [{}, {"email": "runner@example.com"}, {"password": "x"}, {"email": "", "password": ""}],
)
def test_login_missing_fields(client, db: Session, body: dict):
    response = client.post("/api/login", json=body)
    assert response.status_code == 400


# ============================================================================
# LEGACY CREDENTIAL UPGRADE TESTS
# ============================================================================


def test_legacy_login_upgrades_credential(client, db: Session):
    """Test a plaintext user can log in and is migrated to a hash on the way."""
    insert_legacy_user(db, "legacy@example.com", "oldsecret")
    assert raw_credential(db, "legacy@example.com") == "oldsecret"

    first = client.post(
        "/api/login", json={"email": "legacy@example.com", "password": "oldsecret"}
    )
    assert first.status_code == 200

    upgraded = raw_credential(db, "legacy@example.com")
    assert upgraded != "oldsecret"
    assert upgraded.startswith("$2")

    second = client.post(
        "/api/login", json={"email": "legacy@example.com", "password": "oldsecret"}
    )
    assert second.status_code == 200
    # The hashed branch does not rewrite the credential again
    assert raw_credential(db, "legacy@example.com") == upgraded


def test_legacy_login_wrong_password_keeps_plaintext(client, db: Session):
    insert_legacy_user(db, "legacy@example.com", "oldsecret")

    response = client.post(
        "/api/login", json={"email": "legacy@example.com", "password": "oldsecreT"}
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"
    assert raw_credential(db, "legacy@example.com") == "oldsecret"


def test_legacy_upgrade_failure_does_not_block_login(client, db: Session, monkeypatch):
    """Test a failed upgrade write is logged and the login still succeeds."""
    insert_legacy_user(db, "legacy@example.com", "oldsecret")

    def failing_update(*args, **kwargs):
        raise SQLAlchemyError("write failed")

    monkeypatch.setattr(user_repo, "update_user_credential", failing_update)

    response = client.post(
        "/api/login", json={"email": "legacy@example.com", "password": "oldsecret"}
    )
    assert response.status_code == 200
    assert raw_credential(db, "legacy@example.com") == "oldsecret"


# ============================================================================
# CURRENT USER TESTS
# ============================================================================


def test_get_current_user_success(client, db: Session, user_token: str, regular_user: dict):
    response = client.get("/api/me", headers={"Authorization": f"Bearer {user_token}"})
    assert response.status_code == 200
    assert response.json()["id"] == regular_user["id"]


def test_get_current_user_without_token(client, db: Session):
    response = client.get("/api/me")
    assert response.status_code == 401


def test_get_current_user_invalid_token(client, db: Session):
    response = client.get("/api/me", headers={"Authorization": "Bearer invalid_token"})
    assert response.status_code == 401
    assert "Could not validate credentials" in response.json()["detail"]


# ============================================================================
# END-TO-END SCENARIO
# ============================================================================


def test_register_login_reset_scenario(client, db: Session, debug_reset_tokens):
    response = client.post(
        "/api/register",
        json={"email": "a@b.com", "password": "password1", "confirmPassword": "password1"},
    )
    assert response.status_code == 201
    assert response.json()["role"] == "user"

    response = client.post("/api/login", json={"email": "a@b.com", "password": "wrong"})
    assert response.status_code == 401

    response = client.post("/api/login", json={"email": "a@b.com", "password": "password1"})
    assert response.status_code == 200

    response = client.post("/api/password/forgot", json={"email": "a@b.com"})
    assert response.status_code == 200
    token = response.json()["token"]

    response = client.post(
        "/api/password/reset", json={"token": token, "newPassword": "newpass1"}
    )
    assert response.status_code == 200

    response = client.post("/api/login", json={"email": "a@b.com", "password": "password1"})
    assert response.status_code == 401

    response = client.post("/api/login", json={"email": "a@b.com", "password": "newpass1"})
    assert response.status_code == 200
