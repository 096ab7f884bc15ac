"""Outbound account emails: delivery backends and the notifier built on them."""

import asyncio
from abc import ABC, abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from urllib.parse import urlencode

import aiosmtplib

from userauth.config import Settings
from userauth.logging_config import get_logger

logger = get_logger(__name__)


class EmailBackend(ABC):
    """Abstract base class for email backends."""

    @abstractmethod
    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
    ) -> bool:
        """Send an email.

        Args:
            to: Recipient email address
            subject: Email subject
            html: HTML content
            text: Plain text alternative

        Returns:
            True if sent successfully
        """


class ConsoleEmailBackend(EmailBackend):
    """Email backend that logs to console (for development)."""

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
    ) -> bool:
        logger.info(
            "EMAIL (console backend - not sent)\nTo: %s\nSubject: %s\n%s",
            to,
            subject,
            text or html,
        )
        return True


class SMTPEmailBackend(EmailBackend):
    """Email backend using SMTP."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        use_tls: bool = True,
        from_address: str = "",
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_address = from_address

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
    ) -> bool:
        message = MIMEMultipart("alternative")
        message["From"] = self.from_address
        message["To"] = to
        message["Subject"] = subject
        if text:
            message.attach(MIMEText(text, "plain"))
        message.attach(MIMEText(html, "html"))

        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                start_tls=self.use_tls,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email via SMTP to %s: %s", to, e)
            return False
        logger.info("Email sent via SMTP to %s", to)
        return True


def get_email_backend(settings: Settings) -> EmailBackend:
    """Build the backend named by ``settings.email_backend``."""
    if settings.email_backend == "console":
        return ConsoleEmailBackend()
    if settings.email_backend == "smtp":
        return SMTPEmailBackend(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            from_address=settings.smtp_from_email,
        )
    raise ValueError(f"Unknown email backend: {settings.email_backend}")


class Notifier:
    """
    Account emails: confirmation links and password-reset links.

    Confirmation mail is awaited by the caller. Reset mail is scheduled as a
    background task and never reports back; failures are only logged.
    """

    def __init__(
        self,
        backend: EmailBackend,
        frontend_url: str,
        link_ttl_minutes: int = 60,
        app_name: str = "User Directory",
    ):
        self.backend = backend
        self.frontend_url = frontend_url.rstrip("/")
        self.link_ttl_minutes = link_ttl_minutes
        self.app_name = app_name
        self._pending: set[asyncio.Task] = set()

    @classmethod
    def from_settings(cls, settings: Settings) -> "Notifier":
        return cls(
            backend=get_email_backend(settings),
            frontend_url=settings.frontend_url,
            link_ttl_minutes=settings.purpose_token_expire_minutes,
            app_name=settings.project_name,
        )

    def confirmation_link(self, token: str) -> str:
        return f"{self.frontend_url}/confirm?{urlencode({'token': token})}"

    def reset_link(self, token: str) -> str:
        return f"{self.frontend_url}/reset-password?{urlencode({'token': token})}"

    async def send_confirmation_email(self, to: str, link: str) -> bool:
        subject = "Confirm Your Account"
        html = (
            f"<h2>Welcome to {self.app_name}!</h2>"
            "<p>Please confirm your account by clicking the link below:</p>"
            f'<a href="{link}">Confirm Account</a>'
            f"<p>This link will expire in {self.link_ttl_minutes} minutes.</p>"
        )
        text = (
            f"Welcome to {self.app_name}!\n\n"
            f"Confirm your account: {link}\n\n"
            f"This link will expire in {self.link_ttl_minutes} minutes.\n"
        )
        return await self.backend.send(to=to, subject=subject, html=html, text=text)

    def send_password_reset_email(self, to: str, link: str) -> asyncio.Task:
        """Schedule the reset email and return immediately."""
        task = asyncio.create_task(self._deliver_reset(to, link))
        self._pending.add(task)
        task.add_done_callback(self._on_reset_done)
        return task

    async def _deliver_reset(self, to: str, link: str) -> None:
        subject = "Reset Your Password"
        html = (
            "<h2>Password reset</h2>"
            "<p>Someone requested a password reset for your account. "
            "Use the link below to choose a new password:</p>"
            f'<a href="{link}">Reset Password</a>'
            f"<p>This link will expire in {self.link_ttl_minutes} minutes. "
            "If you did not ask for this, ignore this email.</p>"
        )
        text = (
            f"Reset your password: {link}\n\n"
            f"This link will expire in {self.link_ttl_minutes} minutes.\n"
            "If you did not ask for this, ignore this email.\n"
        )
        if not await self.backend.send(to=to, subject=subject, html=html, text=text):
            logger.error("Error sending password reset email to %s", to)

    def _on_reset_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Error sending password reset email", exc_info=exc)

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every scheduled reset email to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
