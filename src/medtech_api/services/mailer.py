"""Outbound email over SMTP."""

from __future__ import annotations

import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr
from typing import Protocol

from starlette.concurrency import run_in_threadpool

from medtech_api.config import Settings
from medtech_api.errors import EmailDeliveryError

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    """Sends one HTML email."""

    async def send(self, to: str, subject: str, html: str, sender_name: str | None = None) -> None: ...


class SMTPMailer:
    """SMTP transport with STARTTLS and login.

    A new connection is opened per message, so one instance can be shared
    by concurrent requests.
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        verify_tls: bool = False,
        sender_name: str = "MedTech",
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self._password = password
        self.use_tls = use_tls
        self.verify_tls = verify_tls
        self.sender_name = sender_name
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> SMTPMailer:
        return cls(
            host=settings.email_host or "localhost",
            port=settings.email_port,
            username=settings.email_user,
            password=settings.email_pass,
            use_tls=settings.email_use_tls,
            verify_tls=settings.email_verify_tls,
            sender_name=settings.email_sender_name,
        )

    def _tls_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context()
        if not self.verify_tls:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def build_message(
        self, to: str, subject: str, html: str, sender_name: str | None = None
    ) -> EmailMessage:
        message = EmailMessage()
        message["From"] = formataddr((sender_name or self.sender_name, self.username or ""))
        message["To"] = to
        message["Subject"] = subject
        message.set_content(html, subtype="html")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls(context=self._tls_context())
            if self.username and self._password:
                smtp.login(self.username, self._password)
            smtp.send_message(message)

    async def send(self, to: str, subject: str, html: str, sender_name: str | None = None) -> None:
        """Send an HTML email.

        Raises:
            EmailDeliveryError: If the SMTP exchange fails
        """
        message = self.build_message(to, subject, html, sender_name)
        try:
            await run_in_threadpool(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(str(e)) from e
        logger.info(f"Sent email '{subject}' to {to}")
