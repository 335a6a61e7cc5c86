"""API route for device-fault predictions.

Accepts a batch of device descriptors, joins them with stored service
history, scores them with the hosted model and returns one prediction per
device in request order.
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import Annotated, Any, TypeVar

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from medtech_api.api.responses import error_response
from medtech_api.config import Settings
from medtech_api.deps import get_app_settings, get_prediction_service
from medtech_api.errors import BadRequest, InternalError, MedTechError
from medtech_api.schemas import ErrorResponse
from medtech_api.services.prediction import PredictionService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["predictions"])

T = TypeVar("T")

PREDICTION_FAILED = "Failed to fetch predictions from the model."

# nginx convention for "client closed request"
CLIENT_CLOSED_REQUEST = 499


class ClientDisconnected(Exception):
    """The caller went away before the pipeline finished."""


async def run_until_disconnected(
    request: Request,
    work: Awaitable[T],
    poll_seconds: float = 0.5,
) -> T:
    """Await ``work``, cancelling it if the client disconnects first.

    Raises:
        ClientDisconnected: If the client disconnected and the work was cancelled
    """
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_seconds)
            if done:
                return task.result()
            if await request.is_disconnected():
                task.cancel()
                await asyncio.wait({task})
                raise ClientDisconnected()
    finally:
        if not task.done():
            task.cancel()


async def _read_payload(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError as e:
        raise BadRequest("Invalid input. Request body must be valid JSON.") from e


@router.post(
    "/predict",
    responses={
        400: {"model": ErrorResponse, "description": "Missing or malformed devices"},
        500: {"model": ErrorResponse, "description": "Store or model failure"},
    },
)
async def predict(
    request: Request,
    service: Annotated[PredictionService, Depends(get_prediction_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> Response:
    """
    Predict device faults for a batch of devices.

    Body: `{"devices": [DeviceDescriptor, ...]}`.

    Returns the model call metadata plus `data`, one prediction per device
    with the device's `id` and `deviceId` attached, in request order.
    """
    try:
        payload = await _read_payload(request)
        result = await run_until_disconnected(
            request,
            service.handle(payload),
            poll_seconds=settings.disconnect_poll_seconds,
        )
    except ClientDisconnected:
        logger.info("Client disconnected; cancelled in-flight prediction")
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    except BadRequest as e:
        logger.info(f"Rejected prediction request: {e.message}")
        return error_response(e, PREDICTION_FAILED)
    except MedTechError as e:
        logger.exception(f"Error fetching predictions ({e.category})")
        return error_response(e, PREDICTION_FAILED)
    except Exception as e:
        logger.exception("Unexpected error fetching predictions")
        return error_response(InternalError(str(e)), PREDICTION_FAILED)

    return JSONResponse(status_code=200, content=result)
