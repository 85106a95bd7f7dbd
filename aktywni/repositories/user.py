from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from aktywni.db.models.user import ROLE_USER, User as UserModel
from aktywni.domain.credentials import HashedCredential
from aktywni.errors import DuplicateResourceError, NotFoundError


def normalize_email(email: str) -> str:
    """Emails are compared and stored trimmed and lowercased."""
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> UserModel | None:
    """Get a user by (normalized) email."""
    return db.query(UserModel).filter(UserModel.email == normalize_email(email)).first()


def get_user_by_id(db: Session, user_id: int) -> UserModel | None:
    """Get a user by ID."""
    return db.query(UserModel).filter(UserModel.id == user_id).first()


def get_user_by_reset_token_hash(db: Session, token_hash: str) -> UserModel | None:
    """Get the user whose outstanding reset token has this digest. Expiry is not checked here."""
    return db.query(UserModel).filter(UserModel.reset_token_hash == token_hash).first()


def get_all_users(db: Session) -> list[UserModel]:
    """Get all users ordered by ID."""
    return db.query(UserModel).order_by(UserModel.id).all()


def count_users(db: Session) -> int:
    return db.query(UserModel).count()


def create_user(
    db: Session,
    email: str,
    credential: HashedCredential,
    role: str = ROLE_USER,
) -> UserModel:
    """
    Create a new user in the database. Pure data access - no business logic.

    Raises:
        DuplicateResourceError: If the unique index on email rejects the insert.
    """
    db_user = UserModel(
        email=normalize_email(email),
        credential=credential,
        role=role,
    )
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        db.rollback()
        raise DuplicateResourceError("Email already registered")
    db.refresh(db_user)
    return db_user


def update_user_credential(
    db: Session, user_id: int, credential: HashedCredential
) -> UserModel:
    """Replace a user's stored credential."""
    user = get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    user.credential = credential
    db.commit()
    db.refresh(user)
    return user


def set_password_reset_token(
    db: Session, user_id: int, token_hash: str, expires: datetime
) -> UserModel:
    """Set (or overwrite) the pending password reset for a user."""
    user = get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    user.reset_token_hash = token_hash
    user.reset_token_expires = expires
    db.commit()
    db.refresh(user)
    return user


def redeem_password_reset_token(
    db: Session, user_id: int, token_hash: str, credential: HashedCredential
) -> bool:
    """
    Store the new credential and clear the pending reset in one UPDATE.

    Only applies while the stored digest still equals ``token_hash``.
    Returns False when another request redeemed or replaced the token first.
    """
    updated = (
        db.query(UserModel)
        .filter(UserModel.id == user_id, UserModel.reset_token_hash == token_hash)
        .update(
            {
                UserModel.credential: credential,
                UserModel.reset_token_hash: None,
                UserModel.reset_token_expires: None,
            },
            synchronize_session="fetch",
        )
    )
    db.commit()
    return updated == 1
