import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib

from aktywni.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_FRONTEND_URL = "http://localhost:5173"


def smtp_configured() -> bool:
    return all([
        settings.smtp_host,
        settings.smtp_port,
        settings.smtp_user,
        settings.smtp_password,
        settings.smtp_from_email,
    ])


def build_reset_link(reset_token: str) -> str:
    base_url = (settings.frontend_url or DEFAULT_FRONTEND_URL).rstrip("/")
    return f"{base_url}/reset-password?token={reset_token}"


async def send_password_reset_email(email: str, reset_token: str) -> None:
    """
    Send the password reset link to a user.

    Args:
        email: User's email address
        reset_token: Raw reset token (only its digest is stored)

    Raises:
        ValueError: If SMTP is not configured.
    """
    if not smtp_configured():
        raise ValueError("SMTP is not configured")

    minutes = settings.password_reset_token_expire_minutes
    reset_link = build_reset_link(reset_token)

    message = MIMEMultipart("alternative")
    message["Subject"] = "Aktywni.pl password reset"
    message["From"] = settings.smtp_from_email
    message["To"] = email

    text = f"""
You requested a password reset for your Aktywni.pl account.

Open the following link to choose a new password:
{reset_link}

The link expires in {minutes} minutes and can be used once.

If you did not request this, you can ignore this email.
    """
    html = f"""
<html>
  <body>
    <p>You requested a password reset for your Aktywni.pl account.</p>
    <p><a href="{reset_link}">Choose a new password</a></p>
    <p>The link expires in {minutes} minutes and can be used once.</p>
    <p>If you did not request this, you can ignore this email.</p>
  </body>
</html>
    """

    message.attach(MIMEText(text, "plain"))
    message.attach(MIMEText(html, "html"))

    send_kwargs = {
        "hostname": settings.smtp_host,
        "port": settings.smtp_port,
        "username": settings.smtp_user,
        "password": settings.smtp_password,
    }

    # Port 465 uses direct TLS, everything else STARTTLS
    if settings.smtp_use_tls:
        if settings.smtp_port == 465:
            send_kwargs["use_tls"] = True
        else:
            send_kwargs["start_tls"] = True

    await aiosmtplib.send(message, **send_kwargs)
    logger.info("Password reset email sent")
