"""
Transactional email sent through an SMTP relay.
"""
import html
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Optional, Union

from fastapi.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.exceptions import ServerError

logger = logging.getLogger(__name__)


class MailService:
    """Service for composing and sending transactional email."""

    def __init__(self):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.timeout = settings.SMTP_TIMEOUT
        self.username = settings.MAIL_USER
        self.password = settings.MAIL_PASS
        self.from_name = settings.MAIL_FROM_NAME

    @staticmethod
    def build_welcome_email(
        name: str,
        coupon_code: Optional[str],
        payment_amount: Optional[Union[float, str]],
    ) -> tuple[str, str]:
        """
        Render the welcome email.

        Returns:
            Subject line and HTML body
        """
        safe_name = html.escape(str(name))
        subject = f"🎉 Welcome, {name}!"
        body = f"""
        <h2>Thanks for joining, {safe_name}!</h2>
        <p>You've successfully applied coupon <strong>{html.escape(str(coupon_code or ''))}</strong>.</p>
        <p>Total payment: <strong>${html.escape(str(payment_amount if payment_amount is not None else ''))}</strong></p>
        <p>We'll be in touch soon!</p>
        """
        return subject, body

    def _send(self, recipient: str, subject: str, html_body: str):
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = formataddr((self.from_name, self.username))
        message["To"] = recipient
        message.attach(MIMEText(html_body, "html"))

        with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
            server.starttls()
            server.login(self.username, self.password)
            server.send_message(message)

    async def send_welcome_email(
        self,
        name: str,
        email: str,
        coupon_code: Optional[str] = None,
        payment_amount: Optional[Union[float, str]] = None,
    ) -> None:
        """
        Send the welcome email. No retry is attempted.

        Raises:
            ServerError: If the relay is not configured or delivery fails
        """
        subject, body = self.build_welcome_email(name, coupon_code, payment_amount)
        try:
            if not self.username or not self.password:
                raise ValueError("MAIL_USER and MAIL_PASS environment variables must be set")
            await run_in_threadpool(self._send, email, subject, body)
        except (smtplib.SMTPException, OSError, ValueError) as e:
            logger.error(f"Email send error to {email}: {e}")
            raise ServerError("Failed to send email")

        logger.info(f"Welcome email sent to {email}")
