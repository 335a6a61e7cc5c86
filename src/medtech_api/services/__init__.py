"""Services package."""

from medtech_api.services.accounts import AccountService
from medtech_api.services.container import ServiceContainer, build_services
from medtech_api.services.identity import Account, FirebaseIdentityProvider, IdentityProvider
from medtech_api.services.mailer import Mailer, SMTPMailer
from medtech_api.services.model_client import (
    GradioPredictionClient,
    ModelResponse,
    PredictionClient,
)
from medtech_api.services.normalizer import InputNormalizer, numeric_device_key
from medtech_api.services.prediction import PredictionService, parse_devices
from medtech_api.services.reconciler import reconcile
from medtech_api.services.records import (
    FirestoreRecordStore,
    InMemoryRecordStore,
    RecordStore,
    UnavailableRecordStore,
)

__all__ = [
    # Records
    "FirestoreRecordStore",
    "InMemoryRecordStore",
    "RecordStore",
    "UnavailableRecordStore",
    # Prediction pipeline
    "InputNormalizer",
    "numeric_device_key",
    "GradioPredictionClient",
    "ModelResponse",
    "PredictionClient",
    "reconcile",
    "PredictionService",
    "parse_devices",
    # Accounts & email
    "Account",
    "AccountService",
    "FirebaseIdentityProvider",
    "IdentityProvider",
    "Mailer",
    "SMTPMailer",
    # Wiring
    "ServiceContainer",
    "build_services",
]
