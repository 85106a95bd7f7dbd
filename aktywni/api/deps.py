from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

import aktywni.repositories.user as user_repo
from aktywni.core.security import decode_token
from aktywni.db.base import SessionLocal
from aktywni.db.models.user import User

# auto_error=False so a missing header is a 401 like any other bad token
bearer_scheme = HTTPBearer(auto_error=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _credentials_exception(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Get the current authenticated user from the bearer JWT."""
    if credentials is None:
        raise _credentials_exception("Not authenticated")

    payload = decode_token(credentials.credentials)
    if payload is None or payload.get("type") != "access":
        raise _credentials_exception()

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise _credentials_exception()

    user = user_repo.get_user_by_id(db, user_id)
    if user is None:
        raise _credentials_exception("User not found")

    return user


def require_roles(*role_names: str):
    """
    Create a dependency that requires the current user to have one of the specified roles.

    Example:
        Depends(require_roles("admin"))
    """
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in role_names:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions",
            )
        return current_user

    return role_checker
