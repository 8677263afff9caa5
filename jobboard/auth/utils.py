"""
Authentication utility functions for password reset links and notifications.

The ``deliver_*`` functions run as FastAPI background tasks after the
response has been sent. Delivery failures are logged here; they never reach
the client.
"""
import logging
from datetime import datetime
from urllib.parse import urlencode

from email_validator import EmailNotValidError, validate_email

from ..core.mailer import SMTPMailer, MailDeliveryError
from .models import AccountRole

# Set up logging
logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """
    Canonical form of an address, identical to what ``EmailStr`` stores at
    registration (domain lowercased, local part kept as typed).

    Strings that are not valid addresses come back stripped; looking them
    up simply finds no account.
    """
    try:
        return validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError:
        return email.strip()


def build_reset_link(frontend_url: str, token: str, role: AccountRole) -> str:
    """
    Build the link embedded in the reset email.

    Args:
        frontend_url: Base URL of the frontend application
        token: Clear text reset token (only ever sent by email)
        role: Partition the account belongs to

    Returns:
        str: ``<frontend_url>/reset-password?token=<hex>&role=<role>``
    """
    query = urlencode({"token": token, "role": role.value})
    return f"{frontend_url.rstrip('/')}/reset-password?{query}"


def render_password_reset_email(app_name: str, reset_link: str, expires_at: datetime, minutes: int):
    """Return (subject, text, html) for the reset email."""
    expiry = expires_at.strftime("%B %d, %Y %H:%M UTC")
    subject = f"[{app_name}] Password reset instructions"
    text = f"""Hello,

We received a request to reset the password for your {app_name} account.

Open the link below within {minutes} minutes to choose a new password:
{reset_link}

The link expires at {expiry}. After that, please request a new one.

If your mail client breaks the link across lines, copy the whole URL into
your browser's address bar.

If you did not request a password reset, you can ignore this email.
This message was sent from an unmonitored address; replies are not read.

{app_name} Team
"""
    html = f"""
    <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6;">
            <p>Hello,</p>
            <p>We received a request to reset the password for your {app_name} account.</p>
            <p><a href="{reset_link}">Reset your password</a></p>
            <p><strong>This link expires in {minutes} minutes ({expiry}).</strong></p>
            <p style="word-break: break-all;">{reset_link}</p>
            <p>If you did not request a password reset, you can ignore this email.</p>
            <p>{app_name} Team</p>
        </body>
    </html>
    """
    return subject, text, html


def render_password_changed_email(app_name: str):
    """Return (subject, text) for the password changed notification."""
    subject = f"[{app_name}] Your password was changed"
    text = f"""Hello,

This email confirms that the password for your {app_name} account was changed.

If you did not make this change, please contact support immediately.

{app_name} Team
"""
    return subject, text


def deliver_password_reset_email(
    mailer: SMTPMailer,
    app_name: str,
    email: str,
    reset_link: str,
    expires_at: datetime,
    minutes: int
) -> bool:
    """
    Send the reset email. Runs as a background task.

    The relay connection is checked first; a failed check is logged and
    delivery still goes through the retry loop.

    Returns:
        bool: True if delivered, False if all attempts failed
    """
    if mailer.is_configured() and not mailer.verify_connection():
        logger.error(f"Mail relay check failed before sending reset email to {email}; trying delivery anyway")

    subject, text, html = render_password_reset_email(app_name, reset_link, expires_at, minutes)
    try:
        mailer.send(email, subject, text, html)
    except MailDeliveryError as e:
        logger.error(f"Password reset email to {email} was not delivered: {e}")
        return False
    logger.info(f"Password reset email delivered to {email}")
    return True


def deliver_password_changed_notification(mailer: SMTPMailer, app_name: str, email: str) -> bool:
    """
    Send the password changed notification. Runs as a background task.

    Returns:
        bool: True if delivered, False otherwise
    """
    if not mailer.is_configured():
        logger.info(f"Mail not configured; skipping password changed notification for {email}")
        return False
    subject, text = render_password_changed_email(app_name)
    try:
        mailer.send(email, subject, text)
    except MailDeliveryError as e:
        logger.error(f"Password changed notification to {email} was not delivered: {e}")
        return False
    return True
