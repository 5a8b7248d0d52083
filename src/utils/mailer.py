"""Outgoing mail.

Password reset links are sent over SMTP when mail is enabled and an SMTP
host is configured. Otherwise delivery is skipped and logged. A failed
delivery never changes what the requester is told.
"""

import html
import logging
import smtplib
from email.message import EmailMessage
from typing import Optional
from urllib.parse import urlencode

import config

logger = logging.getLogger(__name__)


def mail_is_configured() -> bool:
    return bool(config.MAIL_ENABLED and config.MAIL_FROM and config.SMTP_HOST)


def build_reset_url(token: str) -> str:
    base = config.PUBLIC_APP_BASE_URL.rstrip("/")
    return f"{base}/reset-password?{urlencode({'token': token})}"


def _build_message(
    *, to_email: str, subject: str, text_body: str, html_body: Optional[str]
) -> EmailMessage:
    message = EmailMessage()
    message["From"] = config.MAIL_FROM
    message["To"] = to_email
    message["Subject"] = subject
    message.set_content(text_body)
    if html_body:
        message.add_alternative(html_body, subtype="html")
    return message


def _send_via_smtp(message: EmailMessage) -> None:
    with smtplib.SMTP(
        host=config.SMTP_HOST, port=config.SMTP_PORT, timeout=config.SMTP_TIMEOUT_SECONDS
    ) as client:
        if config.SMTP_USE_TLS:
            client.ehlo()
            client.starttls()
            client.ehlo()
        if config.SMTP_USERNAME:
            client.login(config.SMTP_USERNAME, config.SMTP_PASSWORD or "")
        client.send_message(message)


def send_password_reset_email(to_email: str, name: str, token: str) -> bool:
    """Send a password reset link.

    Args:
        to_email: Recipient address.
        name: Recipient display name.
        token: Raw reset token.

    Returns:
        True if the message was handed to the SMTP server.
    """
    if not mail_is_configured():
        logger.info("Mail not configured, skipping password reset email")
        return False

    reset_url = build_reset_url(token)
    ttl_hours = config.PASSWORD_RESET_TTL_HOURS
    text_body = (
        f"Hello {name},\n\n"
        "We received a request to reset your LitPlatform password.\n\n"
        f"Open this link to choose a new password:\n{reset_url}\n\n"
        f"The link expires in {ttl_hours} hours. If you did not ask for a "
        "reset, ignore this email and your password stays unchanged.\n"
    )
    html_body = (
        f"<p>Hello {html.escape(name)},</p>"
        "<p>We received a request to reset your LitPlatform password.</p>"
        f'<p><a href="{html.escape(reset_url)}">Reset your password</a></p>'
        f"<p>The link expires in {ttl_hours} hours. If you did not ask for a reset, "
        "ignore this email and your password stays unchanged.</p>"
    )
    message = _build_message(
        to_email=to_email,
        subject="Reset your LitPlatform password",
        text_body=text_body,
        html_body=html_body,
    )
    try:
        _send_via_smtp(message)
    except (smtplib.SMTPException, OSError) as e:
        logger.error("Password reset email failed: %s", e)
        return False
    logger.info("Password reset email sent")
    return True
