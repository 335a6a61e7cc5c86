"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Any, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        protected_namespaces=("settings_",),
    )

    # API Settings
    app_name: str = "MedTech Maintenance API"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 3001
    workers: int = 1

    # Firebase service account
    type: str = "service_account"
    project_id: str | None = None
    private_key_id: str | None = None
    private_key: str | None = None
    client_email: str | None = None
    client_id: str | None = None
    auth_uri: str = "https://accounts.google.com/o/oauth2/auth"
    token_uri: str = "https://oauth2.googleapis.com/token"
    auth_provider_x509_cert_url: str = "https://www.googleapis.com/oauth2/v1/certs"
    client_x509_cert_url: str | None = None
    universe_domain: str = "googleapis.com"

    # Firestore collections
    service_records_collection: str = "serviceRecords"
    users_collection: str = "users"

    # Email Settings
    email_host: str | None = None
    email_port: int = 587
    email_user: str | None = None
    email_pass: str | None = None
    email_use_tls: bool = True
    email_verify_tls: bool = False
    email_sender_name: str = "MedTech"
    email_notification_sender_name: str = "MedTech Notification"

    # Prediction model Settings
    model_base_url: str = "https://hari1427-fault-device-prediction.hf.space"
    model_api_name: str = "predict"
    model_timeout_seconds: float = 30.0
    model_api_token: str | None = None
    record_match_field: Literal["deviceId", "id"] = "deviceId"

    # Request handling
    disconnect_poll_seconds: float = 0.5

    @field_validator("private_key")
    @classmethod
    def _unescape_private_key(cls, value: str | None) -> str | None:
        # Keys pasted into .env files carry literal "\n" sequences
        if value is None:
            return None
        return value.replace("\\n", "\n")

    @property
    def firebase_configured(self) -> bool:
        """Whether enough service account fields are set to talk to Firebase."""
        return bool(self.project_id and self.private_key and self.client_email)

    @property
    def email_configured(self) -> bool:
        """Whether an SMTP host and sender account are set."""
        return bool(self.email_host and self.email_user)

    def service_account_info(self) -> dict[str, Any]:
        """Build the service account mapping expected by firebase-admin."""
        return {
            "type": self.type,
            "project_id": self.project_id,
            "private_key_id": self.private_key_id,
            "private_key": self.private_key,
            "client_email": self.client_email,
            "client_id": self.client_id,
            "auth_uri": self.auth_uri,
            "token_uri": self.token_uri,
            "auth_provider_x509_cert_url": self.auth_provider_x509_cert_url,
            "client_x509_cert_url": self.client_x509_cert_url,
            "universe_domain": self.universe_domain,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
