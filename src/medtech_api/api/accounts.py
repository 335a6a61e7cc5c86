"""API routes for technician accounts and service notifications."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from medtech_api.api.responses import bad_request, error_response
from medtech_api.deps import get_account_service
from medtech_api.errors import InternalError, MedTechError
from medtech_api.schemas import (
    CreateUserRequest,
    ErrorResponse,
    MessageResponse,
    ResendInviteRequest,
    ServiceEmailRequest,
)
from medtech_api.services.accounts import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["accounts"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing required fields"},
    500: {"model": ErrorResponse, "description": "Identity or email failure"},
}


def _failure(exc: Exception, error: str) -> JSONResponse:
    logger.exception(f"{error} {exc}")
    if not isinstance(exc, MedTechError):
        exc = InternalError(str(exc))
    return error_response(exc, error)


@router.post(
    "/create-user",
    status_code=201,
    response_model=MessageResponse,
    responses=ERROR_RESPONSES,
)
async def create_user(
    request: CreateUserRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
):
    """
    Create a technician account and email a password-set link.

    - **email**: Technician email address
    - **name**: Display name
    """
    if not request.email or not request.name:
        return bad_request("Email and name are required.")

    try:
        await service.create_technician(request.email, request.name)
    except Exception as e:
        return _failure(e, "Failed to create user and send email.")

    return MessageResponse(message="User created successfully. Welcome email sent.")


@router.post("/resend-invite", response_model=MessageResponse, responses=ERROR_RESPONSES)
async def resend_invite(
    request: ResendInviteRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
):
    """Email a fresh password-set link to an existing technician."""
    if not request.email:
        return bad_request("Email is required.")

    try:
        await service.resend_invite(request.email)
    except Exception as e:
        return _failure(e, "Failed to send password reset email.")

    return MessageResponse(message="Password reset email sent successfully.")


@router.post("/send-service-email", response_model=MessageResponse, responses=ERROR_RESPONSES)
async def send_service_email(
    request: ServiceEmailRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
):
    """
    Notify a technician about a newly assigned service task.

    - **technicianEmail**, **technicianName**: Recipient
    - **deviceName**: Device to be serviced
    - **scheduledDate**: ISO date of the scheduled service
    """
    if not (
        request.technician_email
        and request.device_name
        and request.scheduled_date
        and request.technician_name
    ):
        return bad_request("Missing required fields for sending email.")

    try:
        await service.send_service_assignment(
            technician_email=request.technician_email,
            technician_name=request.technician_name,
            device_name=request.device_name,
            scheduled_date=request.scheduled_date,
        )
    except Exception as e:
        return _failure(e, "Failed to send service notification email.")

    return MessageResponse(message="Service notification email sent successfully.")
