"""Tests for the prediction and health endpoints."""

import asyncio
import importlib
import logging

import pytest
from fastapi.testclient import TestClient

from medtech_api.api.predictions import ClientDisconnected, run_until_disconnected
from medtech_api.errors import ModelResponseMalformed, StoreUnavailable
from medtech_api import main as main_module
from medtech_api.config import Settings, get_settings
from medtech_api.main import configure_logging, create_app
from medtech_api.services.container import ServiceContainer
from medtech_api.services.records import UnavailableRecordStore

from fakes import FailingRecordStore, FakeMailer, FakeModelClient


class TestHealthEndpoints:
    """Test health check endpoints."""

    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"
        assert data["record_store_configured"] is True

    def test_readiness_check(self, client):
        response = client.get("/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_not_ready_without_store(self, settings):
        services = ServiceContainer(
            record_store=UnavailableRecordStore("not configured"),
            model_client=FakeModelClient(),
            mailer=FakeMailer(),
            configured={"record_store": False, "model_client": True, "mailer": False},
        )
        client = TestClient(create_app(settings=settings, services=services))

        data = client.get("/ready").json()
        assert data == {"status": "not_ready", "reason": "record_store_not_configured"}

    def test_liveness_check(self, client):
        response = client.get("/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"


class TestRootEndpoint:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "MedTech Maintenance API"
        assert data["docs"] == "/docs"


class TestAppFactory:
    """Logging is configured from the settings the factory receives."""

    @pytest.fixture
    def basic_config_calls(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
        return calls

    @pytest.mark.parametrize(
        ("log_level", "expected"),
        [("debug", logging.DEBUG), ("WARNING", logging.WARNING), ("LOUD", logging.INFO), ("", logging.INFO)],
    )
    def test_log_level_resolution(self, basic_config_calls, log_level, expected):
        configure_logging(Settings(_env_file=None, log_level=log_level))

        assert basic_config_calls[0]["level"] == expected

    def test_create_app_uses_given_settings(self, basic_config_calls, services):
        settings = Settings(_env_file=None, app_name="Bench API", log_level="LOUD")

        client = TestClient(create_app(settings=settings, services=services))

        assert client.get("/").json()["name"] == "Bench API"
        assert basic_config_calls[0]["level"] == logging.INFO

    def test_import_does_not_read_settings(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("LOG_LEVEL", "LOUD")
        get_settings.cache_clear()
        try:
            importlib.reload(main_module)
            assert get_settings.cache_info().currsize == 0
        finally:
            get_settings.cache_clear()


class TestPredictEndpoint:
    """Test the device-fault prediction endpoint."""

    def test_predictions_keep_order_and_identity(self, client, model_client, sample_devices):
        model_client.predictions = [{"risk": "low"}, {"risk": "high"}]

        response = client.post("/predict", json={"devices": sample_devices})

        assert response.status_code == 200
        data = response.json()
        assert data["type"] == "data"
        assert data["endpoint"] == "/predict"
        assert data["data"] == [
            {"risk": "low", "id": "a", "deviceId": "VENT-004"},
            {"risk": "high", "id": "b", "deviceId": "XRAY-9"},
        ]

    def test_model_receives_normalized_batch(self, client, model_client, sample_devices):
        client.post("/predict", json={"devices": sample_devices})

        batch = model_client.batches[0]
        assert [item.device_id for item in batch] == [4, 9]
        assert batch[0].reason == "Alarm failure"
        assert batch[1].description == "N/A"

    @pytest.mark.parametrize(
        "body",
        [
            {"devices": "not-an-array"},
            {},
            {"devices": None},
            {"devices": [1, 2]},
        ],
    )
    def test_invalid_devices_rejected_without_side_effects(
        self, client, record_store, model_client, body
    ):
        response = client.post("/predict", json=body)

        assert response.status_code == 400
        assert "devices" in response.json()["error"]
        assert record_store.calls == 0
        assert model_client.batches == []

    def test_invalid_json_rejected(self, client, record_store):
        response = client.post(
            "/predict", content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert record_store.calls == 0

    def test_store_failure_is_500(self, settings, sample_devices):
        model = FakeModelClient()
        services = ServiceContainer(
            record_store=FailingRecordStore(StoreUnavailable("deadline exceeded")),
            model_client=model,
            mailer=FakeMailer(),
        )
        client = TestClient(create_app(settings=settings, services=services))

        response = client.post("/predict", json={"devices": sample_devices})

        assert response.status_code == 500
        data = response.json()
        assert data["category"] == "StoreUnavailable"
        assert data["error"] == "Failed to fetch predictions from the model."
        assert data["details"] == "deadline exceeded"
        assert "data" not in data
        assert model.batches == []

    def test_model_unavailable_is_500(self, settings, record_store, unavailable_model, sample_devices):
        services = ServiceContainer(
            record_store=record_store, model_client=unavailable_model, mailer=FakeMailer()
        )
        client = TestClient(create_app(settings=settings, services=services))

        response = client.post("/predict", json={"devices": sample_devices})

        assert response.status_code == 500
        assert response.json()["category"] == "ModelUnavailable"

    def test_malformed_model_response_is_500(self, client, model_client, sample_devices):
        model_client.error = ModelResponseMalformed("Model output is not valid JSON")

        response = client.post("/predict", json={"devices": sample_devices})

        assert response.status_code == 500
        assert response.json()["category"] == "ModelResponseMalformed"

    def test_count_mismatch_is_500(self, client, model_client, sample_devices):
        model_client.predictions = [{"risk": "low"}]

        response = client.post("/predict", json={"devices": sample_devices})

        assert response.status_code == 500
        data = response.json()
        assert data["category"] == "PredictionCountMismatch"
        assert "data" not in data

    def test_unexpected_error_is_internal(self, client, model_client, sample_devices):
        model_client.error = RuntimeError("boom")

        response = client.post("/predict", json={"devices": sample_devices})

        assert response.status_code == 500
        assert response.json()["category"] == "InternalError"
        assert response.json()["details"] == "boom"

    def test_overlong_device_code_does_not_fail_batch(self, client, model_client):
        devices = [{"id": "a", "deviceId": "D-" + "9" * 5000}, {"id": "b", "deviceId": "XRAY-9"}]

        response = client.post("/predict", json={"devices": devices})

        assert response.status_code == 200
        assert len(response.json()["data"]) == 2
        assert [item.device_id for item in model_client.batches[0]] == [0, 9]

    def test_empty_batch(self, client, model_client):
        response = client.post("/predict", json={"devices": []})

        assert response.status_code == 200
        assert response.json()["data"] == []


class TestDisconnectCancellation:
    """Test that in-flight work is cancelled when the caller goes away."""

    class _Request:
        def __init__(self, disconnected):
            self.disconnected = disconnected

        async def is_disconnected(self):
            return self.disconnected

    def test_work_cancelled_on_disconnect(self):
        cancelled = []

        async def slow_work():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.append(True)
                raise

        async def run():
            await run_until_disconnected(self._Request(True), slow_work(), poll_seconds=0.01)

        with pytest.raises(ClientDisconnected):
            asyncio.run(run())
        assert cancelled == [True]

    def test_result_returned_when_connected(self):
        async def quick_work():
            await asyncio.sleep(0.02)
            return "done"

        async def run():
            return await run_until_disconnected(
                self._Request(False), quick_work(), poll_seconds=0.005
            )

        assert asyncio.run(run()) == "done"
