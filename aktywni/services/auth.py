"""Auth service: registration, login with credential upgrade, password reset issue and redemption."""

import logging

import aiosmtplib
from fastapi import BackgroundTasks
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import aktywni.repositories.user as user_repo
from aktywni.core.config import settings
from aktywni.core.security import (
    create_access_token,
    generate_reset_token,
    hash_reset_token,
    validate_password,
)
from aktywni.core.timeutil import utcnow
from aktywni.db.models.user import User as UserModel
from aktywni.domain.credentials import HashedCredential, dummy_verify, hash_credential, verify
from aktywni.domain.reset_policy import ResetTokenPolicy
from aktywni.errors import DomainValidationError, DuplicateResourceError, UnauthorizedError
from aktywni.schemas.user import (
    AuthResponse,
    ForgotPasswordResponse,
    Message,
    RegisterRequest,
)
from aktywni.services.email import build_reset_link, send_password_reset_email

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_RESET_TOKEN = "Invalid or expired token"
FORGOT_PASSWORD_MESSAGE = "If the account exists, a password reset token has been generated."


def _reset_policy() -> ResetTokenPolicy:
    return ResetTokenPolicy.from_minutes(settings.password_reset_token_expire_minutes)


def _auth_response(user: UserModel) -> AuthResponse:
    token = create_access_token(data={"sub": str(user.id), "role": user.role})
    return AuthResponse(id=user.id, email=user.email, role=user.role, token=token)


def register(db: Session, data: RegisterRequest) -> AuthResponse:
    """
    Register a new user and open a session.

    - Validates password length
    - Validates password confirmation
    - Validates email uniqueness (the unique index backs this up under races)

    Raises:
        DomainValidationError: Weak password or confirmation mismatch.
        DuplicateResourceError: Email already registered.
    """
    is_valid, error_message = validate_password(
        data.password, settings.register_password_min_length
    )
    if not is_valid:
        raise DomainValidationError(error_message)

    if data.password != data.confirm_password:
        raise DomainValidationError("Passwords do not match")

    if user_repo.get_user_by_email(db, data.email):
        raise DuplicateResourceError("Email already registered")

    user = user_repo.create_user(
        db, email=data.email, credential=hash_credential(data.password)
    )
    logger.info("Registered user %s", user.id)
    return _auth_response(user)


def login(db: Session, email: str, password: str) -> AuthResponse:
    """
    Authenticate user by email and password, return a bearer token.

    A legacy plaintext credential that matches is replaced by its hash.

    Raises:
        UnauthorizedError: If email not found or password incorrect (same message).
    """
    user = user_repo.get_user_by_email(db, email)
    if user is None:
        dummy_verify()
        raise UnauthorizedError(INVALID_CREDENTIALS)

    result = verify(password, user.credential)
    if not result.matched:
        raise UnauthorizedError(INVALID_CREDENTIALS)

    response = _auth_response(user)
    if result.upgraded_credential is not None:
        _upgrade_credential(db, user.id, result.upgraded_credential)
    return response


def _upgrade_credential(db: Session, user_id: int, credential: HashedCredential) -> None:
    # The login already succeeded; a failed write is retried by the next login
    try:
        user_repo.update_user_credential(db, user_id, credential)
    except SQLAlchemyError:
        db.rollback()
        logger.warning("Could not upgrade legacy credential for user %s", user_id, exc_info=True)
        return
    logger.info("Upgraded legacy plaintext credential for user %s", user_id)


def forgot_password(
    db: Session, email: str, background_tasks: BackgroundTasks
) -> ForgotPasswordResponse:
    """
    Issue a password reset token and schedule its delivery.

    Always returns the same message, whether the account exists, does not
    exist, or something failed on the way (no user enumeration). Delivery
    runs as a background task after the response, so a known email costs one
    lookup and one write, like an unknown one costs one lookup. The raw token
    is only included when RESET_TOKEN_IN_RESPONSE is enabled.
    """
    generic = ForgotPasswordResponse(message=FORGOT_PASSWORD_MESSAGE)
    normalized = user_repo.normalize_email(email or "")
    if not normalized:
        return generic

    try:
        user = user_repo.get_user_by_email(db, normalized)
        if user is None:
            return generic

        raw_token = generate_reset_token()
        expires = _reset_policy().expires_at(utcnow())
        user_repo.set_password_reset_token(db, user.id, hash_reset_token(raw_token), expires)
        logger.info("Password reset token issued for user %s", user.id)
    except Exception:
        logger.exception("Password reset request failed")
        _rollback_quietly(db)
        return generic

    background_tasks.add_task(deliver_reset_token, user.email, raw_token)

    if settings.reset_token_in_response:
        return ForgotPasswordResponse(message=FORGOT_PASSWORD_MESSAGE, token=raw_token)
    return generic


async def deliver_reset_token(email: str, raw_token: str) -> None:
    """Send the reset link. Runs after the response; every failure is logged here."""
    if settings.reset_token_in_response:
        logger.info("RESET LINK: %s", build_reset_link(raw_token))

    try:
        await send_password_reset_email(email, raw_token)
    except ValueError as e:
        logger.warning("Password reset email not sent: %s", e)
    except (aiosmtplib.SMTPException, OSError) as e:
        logger.error("Failed to send password reset email: %s", e)
    except Exception:
        logger.exception("Password reset email delivery failed")


def _rollback_quietly(db: Session) -> None:
    try:
        db.rollback()
    except SQLAlchemyError:
        logger.warning("Rollback after failed password reset request failed", exc_info=True)


def reset_password(db: Session, token: str, new_password: str) -> Message:
    """
    Redeem a reset token and set a new password.

    The token is single-use: redemption clears the stored digest, so a replay
    no longer matches anything.

    Raises:
        DomainValidationError: Missing token, short password, or invalid/expired token.
    """
    token = (token or "").strip()
    if not token:
        raise DomainValidationError("token and newPassword required")

    is_valid, error_message = validate_password(
        new_password or "", settings.reset_password_min_length
    )
    if not is_valid:
        raise DomainValidationError(error_message)

    token_hash = hash_reset_token(token)
    user = user_repo.get_user_by_reset_token_hash(db, token_hash)
    if user is None:
        logger.info("Password reset rejected: unknown token")
        raise DomainValidationError(INVALID_RESET_TOKEN)

    if _reset_policy().is_expired(user.reset_token_expires, utcnow()):
        logger.info("Password reset rejected for user %s: token expired", user.id)
        raise DomainValidationError(INVALID_RESET_TOKEN)

    redeemed = user_repo.redeem_password_reset_token(
        db, user.id, token_hash, hash_credential(new_password)
    )
    if not redeemed:
        logger.info("Password reset rejected for user %s: token already used", user.id)
        raise DomainValidationError(INVALID_RESET_TOKEN)

    logger.info("Password reset completed for user %s", user.id)
    return Message(message="Password updated")
