"""Technician account provisioning in Firebase Authentication + Firestore."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Any, Protocol

from firebase_admin import auth
from starlette.concurrency import run_in_threadpool

from medtech_api.errors import IdentityProviderError

logger = logging.getLogger(__name__)

TECHNICIAN_ROLE = "technician"


@dataclass
class Account:
    """Minimal view of a provisioned user."""

    uid: str
    email: str
    display_name: str | None = None


class IdentityProvider(Protocol):
    """Account operations the technician endpoints rely on."""

    async def create_technician(self, email: str, name: str) -> Account: ...

    async def get_user_by_email(self, email: str) -> Account: ...

    async def generate_password_reset_link(self, email: str) -> str: ...


class FirebaseIdentityProvider:
    """Creates users in Firebase Auth and profiles in a Firestore collection."""

    def __init__(self, app: Any, db: Any, users_collection: str = "users") -> None:
        """Initialize provider.

        Args:
            app: Initialized ``firebase_admin.App``
            db: Firestore client for the same project
            users_collection: Collection holding user profile documents
        """
        self._app = app
        self._db = db
        self._users_collection = users_collection

    def _create_technician(self, email: str, name: str) -> Account:
        # The user sets a real password through the reset link
        user = auth.create_user(
            email=email,
            email_verified=False,
            password=secrets.token_urlsafe(24),
            display_name=name,
            disabled=False,
            app=self._app,
        )
        self._db.collection(self._users_collection).document(user.uid).set(
            {"name": name, "email": email, "role": TECHNICIAN_ROLE}
        )
        return Account(uid=user.uid, email=email, display_name=name)

    async def create_technician(self, email: str, name: str) -> Account:
        """Create the auth user and its technician profile document."""
        try:
            account = await run_in_threadpool(self._create_technician, email, name)
        except Exception as e:
            raise IdentityProviderError(str(e)) from e
        logger.info(f"Created technician account {account.uid}")
        return account

    async def get_user_by_email(self, email: str) -> Account:
        try:
            user = await run_in_threadpool(auth.get_user_by_email, email, app=self._app)
        except Exception as e:
            raise IdentityProviderError(str(e)) from e
        return Account(uid=user.uid, email=user.email or email, display_name=user.display_name)

    async def generate_password_reset_link(self, email: str) -> str:
        """Generate a time-limited link for the user to set their password."""
        try:
            return await run_in_threadpool(
                auth.generate_password_reset_link, email, app=self._app
            )
        except Exception as e:
            raise IdentityProviderError(str(e)) from e
