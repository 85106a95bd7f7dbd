import json

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from sqlalchemy.orm import Session

from aktywni.api.deps import get_current_user, get_db
from aktywni.db.models.user import User as UserModel
from aktywni.schemas.user import (
    AuthResponse,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    Message,
    PasswordReset,
    RegisterRequest,
    User,
)
from aktywni.services import auth as auth_service

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account with the "user" role and return a bearer token for it."""
    return auth_service.register(db, data)


@router.post("/login", response_model=AuthResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """
    Login endpoint - returns a bearer token.

    Unknown email and wrong password get the same 401.
    """
    return auth_service.login(db, data.email, data.password)


def _email_from_body(raw: bytes) -> str:
    """Pull ``email`` out of any body. Anything unusable becomes "" (no 400 here)."""
    try:
        payload = json.loads(raw) if raw else None
    except ValueError:
        return ""
    if not isinstance(payload, dict):
        return ""
    email = payload.get("email")
    if isinstance(email, (str, int, float)) and email:
        return str(email)
    return ""


@router.post(
    "/password/forgot",
    response_model=ForgotPasswordResponse,
    response_model_exclude_none=True,
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": ForgotPasswordRequest.model_json_schema()}}
        }
    },
)
async def forgot_password(
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """
    Request a password reset. The answer is the same whether or not the account exists.

    The body is read leniently: malformed JSON or a missing/odd email still
    gets the generic answer.
    """
    email = _email_from_body(await request.body())
    return auth_service.forgot_password(db, email, background_tasks)


@router.post("/password/reset", response_model=Message)
def reset_password(reset_data: PasswordReset, db: Session = Depends(get_db)):
    """Reset password using the token from the reset link."""
    return auth_service.reset_password(db, reset_data.token, reset_data.new_password)


@router.get("/me", response_model=User)
def get_current_user_info(current_user: UserModel = Depends(get_current_user)):
    """Get current authenticated user information."""
    return User.model_validate(current_user)
