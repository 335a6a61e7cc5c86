"""Device-fault prediction service.

Sequences one prediction request:

    Received -> Validated -> RecordsFetched -> Normalized -> Predicted
    -> Reconciled -> Responded

Any failure short-circuits to Failed and propagates as a ``MedTechError``.
No partial results are ever returned.
"""

from __future__ import annotations

import logging
import uuid
from enum import Enum
from typing import Any

from pydantic import ValidationError

from medtech_api.errors import BadRequest
from medtech_api.schemas import DeviceDescriptor
from medtech_api.services.model_client import PredictionClient
from medtech_api.services.normalizer import InputNormalizer
from medtech_api.services.reconciler import reconcile
from medtech_api.services.records import RecordStore

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    """Stages of a single prediction request."""

    RECEIVED = "Received"
    VALIDATED = "Validated"
    RECORDS_FETCHED = "RecordsFetched"
    NORMALIZED = "Normalized"
    PREDICTED = "Predicted"
    RECONCILED = "Reconciled"
    RESPONDED = "Responded"
    FAILED = "Failed"


def parse_devices(payload: Any) -> list[DeviceDescriptor]:
    """Validate the request body and extract its device descriptors.

    Raises:
        BadRequest: Unless ``payload`` is an object whose ``devices`` is a
            list of objects
    """
    devices = payload.get("devices") if isinstance(payload, dict) else None
    if not isinstance(devices, list):
        raise BadRequest('Invalid input. "devices" should be an array.')

    parsed = []
    for index, item in enumerate(devices):
        if not isinstance(item, dict):
            raise BadRequest(f'Invalid input. "devices[{index}]" should be an object.')
        try:
            parsed.append(DeviceDescriptor.model_validate(item))
        except ValidationError as e:
            raise BadRequest(f'Invalid input. "devices[{index}]": {e}') from e
    return parsed


class PredictionService:
    """Orchestrates store read, normalization, remote scoring and reconciliation.

    Holds no per-request state; one instance serves all requests.
    """

    def __init__(
        self,
        store: RecordStore,
        client: PredictionClient,
        normalizer: InputNormalizer | None = None,
    ) -> None:
        self.store = store
        self.client = client
        self.normalizer = normalizer or InputNormalizer()

    async def predict(
        self,
        devices: list[DeviceDescriptor],
        request_id: str | None = None,
    ) -> dict[str, Any]:
        """Run the pipeline for validated devices.

        Args:
            devices: Device descriptors in caller order
            request_id: Correlation id for log lines (generated when omitted)

        Returns:
            Model call metadata plus ``data``, one result per device in order

        Raises:
            MedTechError: On any stage failure
        """
        request_id = request_id or _new_request_id()
        state = self._advance(request_id, PipelineState.VALIDATED, f"{len(devices)} devices")

        try:
            records = await self.store.fetch_all_service_records()
            state = self._advance(request_id, PipelineState.RECORDS_FETCHED)

            batch = self.normalizer.normalize(devices, records)
            state = self._advance(request_id, PipelineState.NORMALIZED)

            response = await self.client.predict(batch)
            state = self._advance(request_id, PipelineState.PREDICTED)

            results = reconcile(response.predictions, devices)
            state = self._advance(request_id, PipelineState.RECONCILED)
        except Exception as e:
            self._fail(request_id, state, e)
            raise

        self._advance(request_id, PipelineState.RESPONDED)
        return {**response.metadata, "data": results}

    async def handle(self, payload: Any) -> dict[str, Any]:
        """Validate a raw request body and run the pipeline.

        Raises:
            BadRequest: If the body does not carry a list of devices; the
                store and the model are not contacted
            MedTechError: On any later stage failure
        """
        request_id = _new_request_id()
        self._advance(request_id, PipelineState.RECEIVED)
        try:
            devices = parse_devices(payload)
        except BadRequest as e:
            self._fail(request_id, PipelineState.RECEIVED, e)
            raise
        return await self.predict(devices, request_id=request_id)

    @staticmethod
    def _advance(request_id: str, state: PipelineState, detail: str = "") -> PipelineState:
        logger.debug(f"[{request_id}] {state.value}" + (f": {detail}" if detail else ""))
        return state

    @staticmethod
    def _fail(request_id: str, state: PipelineState, error: Exception) -> None:
        logger.warning(f"[{request_id}] {PipelineState.FAILED.value} after {state.value}: {error}")


def _new_request_id() -> str:
    return uuid.uuid4().hex[:8]
