"""Client for the hosted device-fault prediction model.

The model runs as a Gradio app. One prediction is a two-step call on the
Gradio queue API:

1. ``POST /gradio_api/call/<api_name>`` with ``{"data": [<batch json>]}``
   answers ``{"event_id": ...}``.
2. ``GET /gradio_api/call/<api_name>/<event_id>`` streams server-sent
   events until ``event: complete`` (data is the JSON list of outputs) or
   ``event: error``.

The first output is itself a JSON-encoded string holding one prediction
object per submitted device.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

import httpx

from medtech_api.config import Settings
from medtech_api.errors import ModelResponseMalformed, ModelUnavailable
from medtech_api.schemas import ModelInputRecord

logger = logging.getLogger(__name__)


@dataclass
class ModelResponse:
    """Decoded result of one batched prediction call."""

    predictions: list[dict[str, Any]]
    metadata: dict[str, Any] = field(default_factory=dict)


class PredictionClient(Protocol):
    """Anything that can score a batch of model input records."""

    async def predict(self, batch: Sequence[ModelInputRecord]) -> ModelResponse: ...


def serialize_batch(batch: Sequence[ModelInputRecord]) -> str:
    """Encode the whole batch as the single JSON string the model accepts."""
    return json.dumps([record.model_dump() for record in batch])


def decode_predictions(outputs: Any, expected: int) -> list[dict[str, Any]]:
    """Decode the nested prediction payload from the model outputs.

    Args:
        outputs: Output list from the ``complete`` event
        expected: Number of submitted devices

    Returns:
        One prediction dict per device

    Raises:
        ModelResponseMalformed: If the payload is missing, not JSON, not a
            list of objects, or of the wrong length
    """
    if not isinstance(outputs, list) or not outputs:
        raise ModelResponseMalformed("Model response contains no output data")

    encoded = outputs[0]
    if isinstance(encoded, str):
        try:
            predictions = json.loads(encoded)
        except json.JSONDecodeError as e:
            raise ModelResponseMalformed(f"Model output is not valid JSON: {e}") from e
    else:
        raise ModelResponseMalformed(
            f"Expected JSON-encoded string as model output, got {type(encoded).__name__}"
        )

    if not isinstance(predictions, list):
        raise ModelResponseMalformed("Model output is not a list of predictions")
    if not all(isinstance(p, dict) for p in predictions):
        raise ModelResponseMalformed("Model output contains non-object predictions")
    if len(predictions) != expected:
        raise ModelResponseMalformed(
            f"Model returned {len(predictions)} predictions for {expected} devices"
        )
    return predictions


class GradioPredictionClient:
    """Async client for a Gradio-hosted prediction endpoint.

    The underlying ``httpx.AsyncClient`` is shared across requests; it is
    safe for concurrent use.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_name: str = "predict",
        timeout_seconds: float = 30.0,
    ) -> None:
        """Initialize client.

        Args:
            http_client: Client whose ``base_url`` points at the Gradio app
            api_name: Gradio endpoint name (without leading slash)
            timeout_seconds: Deadline for the whole two-step call
        """
        self._http = http_client
        self.api_name = api_name.strip("/")
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> GradioPredictionClient:
        """Build a client with its own connection pool from settings."""
        headers = {"Content-Type": "application/json"}
        if settings.model_api_token:
            headers["Authorization"] = f"Bearer {settings.model_api_token}"
        http_client = httpx.AsyncClient(
            base_url=settings.model_base_url.rstrip("/"),
            headers=headers,
            timeout=settings.model_timeout_seconds,
            follow_redirects=True,
        )
        return cls(
            http_client,
            api_name=settings.model_api_name,
            timeout_seconds=settings.model_timeout_seconds,
        )

    @property
    def endpoint(self) -> str:
        return f"/gradio_api/call/{self.api_name}"

    async def aclose(self) -> None:
        await self._http.aclose()

    async def predict(self, batch: Sequence[ModelInputRecord]) -> ModelResponse:
        """Score a batch with one remote call.

        Args:
            batch: Normalized model input records

        Returns:
            Decoded predictions (same length as ``batch``) and call metadata

        Raises:
            ModelUnavailable: On transport failure, timeout, HTTP error or a
                remote ``error`` event
            ModelResponseMalformed: If the response cannot be decoded
        """
        payload = serialize_batch(batch)
        logger.debug(f"Model input parameters: {payload}")

        try:
            event_id, outputs = await asyncio.wait_for(
                self._call(payload), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError as e:
            raise ModelUnavailable(
                f"Prediction call timed out after {self.timeout_seconds}s"
            ) from e
        except httpx.HTTPStatusError as e:
            raise ModelUnavailable(
                f"Prediction service returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise ModelUnavailable(f"Prediction service unreachable: {e}") from e

        logger.debug(f"Model response: {json.dumps(outputs)}")
        predictions = decode_predictions(outputs, expected=len(batch))
        metadata = {
            "type": "data",
            "endpoint": f"/{self.api_name}",
            "event_id": event_id,
            "time": datetime.now(timezone.utc).isoformat(),
        }
        return ModelResponse(predictions=predictions, metadata=metadata)

    async def _call(self, payload: str) -> tuple[str, Any]:
        response = await self._http.post(self.endpoint, json={"data": [payload]})
        response.raise_for_status()
        try:
            event_id = response.json()["event_id"]
        except (ValueError, KeyError, TypeError) as e:
            raise ModelResponseMalformed("Prediction service did not return an event id") from e

        outputs = await self._read_result(f"{self.endpoint}/{event_id}")
        return str(event_id), outputs

    async def _read_result(self, url: str) -> Any:
        event = None
        async with self._http.stream("GET", url) as response:
            response.raise_for_status()
            async for line in response.aiter_lines():
                if line.startswith("event:"):
                    event = line[len("event:") :].strip()
                elif line.startswith("data:"):
                    data = line[len("data:") :].strip()
                    if event == "complete":
                        try:
                            return json.loads(data)
                        except json.JSONDecodeError as e:
                            raise ModelResponseMalformed(
                                f"Model response is not valid JSON: {e}"
                            ) from e
                    if event == "error":
                        raise ModelUnavailable(f"Prediction service reported an error: {data}")
        raise ModelResponseMalformed("Prediction stream ended without a result")
