"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from medtech_api.config import Settings
from medtech_api.errors import ModelUnavailable
from medtech_api.main import create_app
from medtech_api.services.container import ServiceContainer

from fakes import CountingRecordStore, FakeIdentityProvider, FakeMailer, FakeModelClient


@pytest.fixture
def settings():
    """Settings isolated from the process environment."""
    return Settings(_env_file=None, environment="development", app_version="0.1.0")


@pytest.fixture
def service_records():
    return [
        {"deviceId": "VENT-004", "reason": "Alarm failure", "description": "Pressure alarm silent"},
        {"deviceId": "VENT-004", "reason": "Duplicate", "description": "Later entry"},
        {"deviceId": "PUMP-12", "reason": "Leak", "description": "Seal replaced"},
    ]


@pytest.fixture
def sample_devices():
    """Device descriptors as sent by the dashboard."""
    return [
        {
            "id": "a",
            "deviceId": "VENT-004",
            "type": "Ventilator",
            "countryEvent": "USA",
            "countryDevice": "USA",
            "manufacturerId": 17,
            "name": "Vent V4",
            "year": 2019,
            "quantityInCommerce": 1200,
        },
        {
            "id": "b",
            "deviceId": "XRAY-9",
            "type": "Imaging",
            "countryEvent": "DEU",
            "countryDevice": "USA",
            "manufacturerId": 3,
            "name": "X-Ray 9",
            "year": 2015,
            "quantityInCommerce": 80,
        },
    ]


@pytest.fixture
def record_store(service_records):
    return CountingRecordStore(service_records)


@pytest.fixture
def model_client():
    return FakeModelClient()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def identity():
    return FakeIdentityProvider()


@pytest.fixture
def services(record_store, model_client, mailer, identity):
    return ServiceContainer(
        record_store=record_store,
        model_client=model_client,
        mailer=mailer,
        identity=identity,
    )


@pytest.fixture
def app(settings, services):
    """Create test application with fake collaborators."""
    return create_app(settings=settings, services=services)


@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def unavailable_model():
    return FakeModelClient(error=ModelUnavailable("connection refused"))
