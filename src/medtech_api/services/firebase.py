"""Firebase Admin SDK initialization."""

from __future__ import annotations

import logging

import firebase_admin
from firebase_admin import credentials, firestore

from medtech_api.config import Settings

logger = logging.getLogger(__name__)

APP_NAME = "medtech-api"


def init_firebase_app(settings: Settings) -> firebase_admin.App:
    """Initialize (or reuse) the named Firebase app from service account settings.

    Raises:
        ValueError: If the service account settings are incomplete
    """
    if not settings.firebase_configured:
        raise ValueError("Firebase service account is not configured (PROJECT_ID, PRIVATE_KEY, CLIENT_EMAIL)")

    try:
        return firebase_admin.get_app(APP_NAME)
    except ValueError:
        pass

    cred = credentials.Certificate(settings.service_account_info())
    app = firebase_admin.initialize_app(cred, name=APP_NAME)
    logger.info(f"Firebase app initialized for project {settings.project_id}")
    return app


def firestore_client(app: firebase_admin.App):
    """Return the Firestore client bound to ``app``."""
    return firestore.client(app)
