"""
SMTP mail delivery with retry and exponential backoff.

The mailer is built from ``Settings`` once and handed to the auth workflow
through the ``get_mailer`` dependency.
"""
import logging
import smtplib
import socket
import ssl
import time
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Optional

from ..config import Settings

# Set up logging
logger = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    """Raised when a message could not be delivered after all retries."""


class SMTPMailer:
    """
    Sends transactional email through a single SMTP relay.

    Authentication and recipient errors are not retried; connection
    problems are retried up to ``mail_max_retries`` times, waiting
    ``mail_retry_delay`` seconds and doubling the wait after every attempt.
    """

    def __init__(self, settings: Settings):
        self.server = settings.mail_server
        self.port = settings.mail_port
        self.username = settings.mail_username
        self.password = settings.mail_password
        self.sender = settings.mail_from
        self.sender_name = settings.mail_from_name
        self.starttls = settings.mail_starttls
        self.ssl_tls = settings.mail_ssl_tls
        self.timeout = settings.mail_timeout
        self.max_retries = max(1, settings.mail_max_retries)
        self.retry_delay = settings.mail_retry_delay

    def is_configured(self) -> bool:
        """
        Validates that all required email configuration values are set.

        Returns:
            bool: True if all required config is present, False otherwise
        """
        missing = [
            name for name, value in (
                ("mail_server", self.server),
                ("mail_from", self.sender),
                ("mail_username", self.username),
                ("mail_password", self.password),
            ) if not value
        ]
        if missing:
            logger.error(f"Missing email configuration: {', '.join(missing)}")
            return False
        return True

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        if self.ssl_tls:
            server = smtplib.SMTP_SSL(self.server, self.port, timeout=self.timeout, context=context)
        else:
            server = smtplib.SMTP(self.server, self.port, timeout=self.timeout)
            server.ehlo()
            if self.starttls:
                server.starttls(context=context)
                server.ehlo()
        if self.username and self.password:
            server.login(self.username, self.password)
        return server

    def verify_connection(self) -> bool:
        """
        Open a session against the relay and issue NOOP.

        Returns:
            bool: True if the relay accepted the connection and credentials
        """
        try:
            with self._connect() as server:
                server.noop()
            logger.info(f"SMTP connection to {self.server}:{self.port} verified")
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP connection to {self.server}:{self.port} failed: {e}")
            return False

    def build_message(self, to: str, subject: str, text: str, html: Optional[str] = None) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["From"] = formataddr((self.sender_name, self.sender))
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(text, "plain", "utf-8"))
        if html:
            msg.attach(MIMEText(html, "html", "utf-8"))
        return msg

    def send(self, to: str, subject: str, text: str, html: Optional[str] = None) -> None:
        """
        Deliver one message, retrying transient failures.

        Args:
            to: Recipient address
            subject: Subject line
            text: Plain text body
            html: Optional HTML alternative

        Raises:
            MailDeliveryError: If the message could not be delivered
        """
        if not self.is_configured():
            raise MailDeliveryError("Email configuration is incomplete")

        msg = self.build_message(to, subject, text, html)
        delay = self.retry_delay
        last_exception = None

        for attempt in range(1, self.max_retries + 1):
            try:
                logger.info(f"Email send attempt {attempt}/{self.max_retries} to {to}")
                with self._connect() as server:
                    server.send_message(msg)
                logger.info(f"Email '{subject}' sent to {to} on attempt {attempt}")
                return

            except smtplib.SMTPAuthenticationError as e:
                logger.error(f"SMTP authentication failed: {e}")
                last_exception = e
                break

            except smtplib.SMTPRecipientsRefused as e:
                logger.error(f"SMTP recipients refused for {to}: {e}")
                last_exception = e
                break

            except (smtplib.SMTPException, socket.timeout, OSError) as e:
                logger.warning(f"SMTP error on attempt {attempt}: {e}")
                last_exception = e
                if attempt < self.max_retries:
                    logger.info(f"Retrying in {delay} seconds...")
                    time.sleep(delay)
                    delay *= 2

        error_msg = f"Failed to send email to {to} after {attempt} attempt(s): {last_exception}"
        logger.error(error_msg)
        raise MailDeliveryError(error_msg) from last_exception
