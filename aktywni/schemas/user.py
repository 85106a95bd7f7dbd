from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    role: str


class AdminUser(User):
    created_at: datetime | None = None


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    password: str = Field(..., min_length=1)
    confirm_password: str = Field(..., alias="confirmPassword")

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AuthResponse(User):
    """User identity plus the bearer token for the new session."""

    token: str


class ForgotPasswordRequest(BaseModel):
    # Documented shape only; the endpoint reads the body leniently
    email: str = ""


class ForgotPasswordResponse(BaseModel):
    message: str
    token: str | None = None


class PasswordReset(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str = ""
    new_password: str = Field("", alias="newPassword")


class Message(BaseModel):
    message: str
