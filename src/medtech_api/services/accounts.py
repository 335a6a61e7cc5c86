"""Technician onboarding and service notification workflows."""

from __future__ import annotations

import logging

from medtech_api.errors import IdentityProviderError
from medtech_api.services.email_templates import (
    reset_email,
    service_assignment_email,
    welcome_email,
)
from medtech_api.services.identity import IdentityProvider
from medtech_api.services.mailer import Mailer

logger = logging.getLogger(__name__)


class AccountService:
    """Sequences identity operations and the emails that follow them."""

    def __init__(
        self,
        identity: IdentityProvider | None,
        mailer: Mailer,
        notification_sender_name: str = "MedTech Notification",
    ) -> None:
        self.identity = identity
        self.mailer = mailer
        self.notification_sender_name = notification_sender_name

    def _require_identity(self) -> IdentityProvider:
        if self.identity is None:
            raise IdentityProviderError("Identity provider is not configured")
        return self.identity

    async def create_technician(self, email: str, name: str) -> None:
        """Create the account, then email the password-set link."""
        identity = self._require_identity()
        account = await identity.create_technician(email, name)
        link = await identity.generate_password_reset_link(email)
        subject, html = welcome_email(name, link)
        await self.mailer.send(email, subject, html)
        logger.info(f"Welcome email sent for {account.uid}")

    async def resend_invite(self, email: str) -> None:
        """Email a fresh password-set link to an existing user."""
        identity = self._require_identity()
        account = await identity.get_user_by_email(email)
        link = await identity.generate_password_reset_link(email)
        subject, html = reset_email(account.display_name, link)
        await self.mailer.send(email, subject, html)

    async def send_service_assignment(
        self,
        technician_email: str,
        technician_name: str,
        device_name: str,
        scheduled_date: str,
    ) -> None:
        """Notify a technician about a newly scheduled service task."""
        subject, html = service_assignment_email(technician_name, device_name, scheduled_date)
        await self.mailer.send(
            technician_email, subject, html, sender_name=self.notification_sender_name
        )
