from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field(alias="DATABASE_URL")

    # Startup connection retry
    db_connect_max_retries: int = Field(default=30, ge=1, alias="DB_CONNECT_MAX_RETRIES")
    db_connect_retry_delay_seconds: float = Field(
        default=1.0, ge=0, alias="DB_CONNECT_RETRY_DELAY_SECONDS"
    )

    # JWT Configuration
    secret_key: str = Field(alias="SECRET_KEY")
    algorithm: str = Field(default="HS256", alias="ALGORITHM")
    access_token_expire_minutes: int = Field(default=60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # First Admin User (seeded by migration when both are set)
    first_admin_email: str | None = Field(default=None, alias="FIRST_ADMIN_EMAIL")
    first_admin_password: str | None = Field(default=None, alias="FIRST_ADMIN_PASSWORD")

    # Password policy
    register_password_min_length: int = Field(default=8, alias="REGISTER_PASSWORD_MIN_LENGTH")
    reset_password_min_length: int = Field(default=6, alias="RESET_PASSWORD_MIN_LENGTH")

    # Password Reset
    password_reset_token_expire_minutes: int = Field(
        default=15, alias="PASSWORD_RESET_TOKEN_EXPIRE_MINUTES"
    )
    # Debug only: echo the raw reset token in the response and the logs
    reset_token_in_response: bool = Field(default=False, alias="RESET_TOKEN_IN_RESPONSE")

    # SMTP Configuration (optional)
    smtp_host: str | None = Field(default=None, alias="SMTP_HOST")
    smtp_port: int | None = Field(default=None, alias="SMTP_PORT")
    smtp_user: str | None = Field(default=None, alias="SMTP_USER")
    smtp_password: str | None = Field(default=None, alias="SMTP_PASSWORD")
    smtp_use_tls: bool = Field(default=True, alias="SMTP_USE_TLS")
    smtp_from_email: str | None = Field(default=None, alias="SMTP_FROM_EMAIL")

    # Frontend URL for password reset links and CORS
    frontend_url: str | None = Field(default=None, alias="FRONTEND_URL")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator(
        "smtp_host",
        "smtp_user",
        "smtp_password",
        "smtp_from_email",
        "first_admin_email",
        "first_admin_password",
        "frontend_url",
        mode="before",
    )
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for optional string fields."""
        if v == "":
            return None
        return v

    @field_validator("smtp_port", mode="before")
    @classmethod
    def empty_str_to_none_int(cls, v: str | int | None) -> int | None:
        """Convert empty strings to None for optional integer fields."""
        if v == "":
            return None
        if isinstance(v, str):
            try:
                return int(v)
            except ValueError:
                return None
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


settings = Settings()
