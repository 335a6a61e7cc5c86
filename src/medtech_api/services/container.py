"""Process-wide service wiring.

Built once at startup and handed to routes through ``app.state`` so tests
can substitute fakes for the record store, the model client, the identity
provider and the mailer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from medtech_api.config import Settings
from medtech_api.services.accounts import AccountService
from medtech_api.services.identity import FirebaseIdentityProvider, IdentityProvider
from medtech_api.services.mailer import Mailer, SMTPMailer
from medtech_api.services.model_client import GradioPredictionClient, PredictionClient
from medtech_api.services.normalizer import InputNormalizer
from medtech_api.services.prediction import PredictionService
from medtech_api.services.records import (
    FirestoreRecordStore,
    RecordStore,
    UnavailableRecordStore,
)

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Collaborators shared by all requests."""

    record_store: RecordStore
    model_client: PredictionClient
    mailer: Mailer
    identity: IdentityProvider | None = None
    normalizer: InputNormalizer = field(default_factory=InputNormalizer)
    notification_sender_name: str = "MedTech Notification"
    configured: dict[str, bool] = field(default_factory=dict)

    def is_configured(self, name: str) -> bool:
        """Whether a collaborator is backed by real settings. Injected fakes count as configured."""
        return self.configured.get(name, True)

    @property
    def prediction_service(self) -> PredictionService:
        return PredictionService(self.record_store, self.model_client, self.normalizer)

    @property
    def account_service(self) -> AccountService:
        return AccountService(self.identity, self.mailer, self.notification_sender_name)

    async def aclose(self) -> None:
        """Release network resources held by the collaborators."""
        closer: Any = getattr(self.model_client, "aclose", None)
        if closer is not None:
            await closer()


def build_services(settings: Settings) -> ServiceContainer:
    """Create the production collaborators from settings.

    Firebase-backed pieces are only built when a service account is
    configured; without one the store fails every read with
    ``StoreUnavailable`` and account endpoints report the provider missing.
    """
    identity: IdentityProvider | None = None
    record_store: RecordStore

    if settings.firebase_configured:
        from medtech_api.services.firebase import firestore_client, init_firebase_app

        app = init_firebase_app(settings)
        db = firestore_client(app)
        record_store = FirestoreRecordStore(db, settings.service_records_collection)
        identity = FirebaseIdentityProvider(app, db, settings.users_collection)
    else:
        logger.warning("Firebase service account not configured; record store disabled")
        record_store = UnavailableRecordStore("Record store is not configured")

    if not settings.email_configured:
        logger.warning("EMAIL_HOST/EMAIL_USER not set; outgoing email will fail")

    return ServiceContainer(
        record_store=record_store,
        model_client=GradioPredictionClient.from_settings(settings),
        mailer=SMTPMailer.from_settings(settings),
        identity=identity,
        normalizer=InputNormalizer(match_field=settings.record_match_field),
        notification_sender_name=settings.email_notification_sender_name,
        configured={
            "record_store": settings.firebase_configured,
            "model_client": True,
            "mailer": settings.email_configured,
        },
    )
