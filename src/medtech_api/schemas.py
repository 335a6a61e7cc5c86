"""Pydantic schemas for API request/response models."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# ============================================================================
# Domain Schemas
# ============================================================================


class DeviceDescriptor(BaseModel):
    """Caller-supplied description of one device to score.

    Accepts both the camelCase field names used by the dashboard and the
    snake_case names the hosted model reads.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: Any = Field(None, description="Opaque storage document id")
    device_id: Any = Field(
        None,
        validation_alias=AliasChoices("deviceId", "device_id"),
        serialization_alias="deviceId",
        description="Human-facing device code, e.g. VENT-004",
    )
    type: Any = None
    country_event: Any = Field(None, validation_alias=AliasChoices("countryEvent", "country_event"))
    country_device: Any = Field(
        None, validation_alias=AliasChoices("countryDevice", "country_device")
    )
    manufacturer_id: Any = Field(
        None, validation_alias=AliasChoices("manufacturerId", "manufacturer_id")
    )
    name: Any = None
    year: Any = None
    quantity_in_commerce: Any = Field(
        None, validation_alias=AliasChoices("quantityInCommerce", "quantity_in_commerce")
    )


class ServiceRecord(BaseModel):
    """Historical maintenance entry linked to a device by its device code."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    device_id: Any = Field(None, validation_alias=AliasChoices("deviceId", "device_id"))
    reason: Any = None
    description: Any = None


class ModelInputRecord(BaseModel):
    """Normalized, model-ready representation of one device."""

    model_config = ConfigDict(frozen=True)

    device_id: int
    type: Any = None
    country_event: Any = None
    country_device: Any = None
    manufacturer_id: Any = None
    name: Any = None
    year: Any = None
    quantity_in_commerce: Any = None
    reason: Any = "N/A"
    description: Any = "N/A"


# ============================================================================
# Request Schemas
# ============================================================================


class CreateUserRequest(BaseModel):
    """Request schema for technician account creation."""

    email: str | None = None
    name: str | None = None


class ResendInviteRequest(BaseModel):
    """Request schema for resending the password-set link."""

    email: str | None = None


class ServiceEmailRequest(BaseModel):
    """Request schema for the service-assignment notification."""

    technician_email: str | None = Field(None, alias="technicianEmail")
    device_name: str | None = Field(None, alias="deviceName")
    scheduled_date: str | None = Field(None, alias="scheduledDate")
    technician_name: str | None = Field(None, alias="technicianName")

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "example": {
                "technicianEmail": "tech@example.com",
                "deviceName": "Ventilator V4",
                "scheduledDate": "2025-03-14",
                "technicianName": "Sam",
            }
        },
    }


# ============================================================================
# Response Schemas
# ============================================================================


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    version: str
    environment: str
    record_store_configured: bool
    model_client_configured: bool
    mailer_configured: bool


# ============================================================================
# Error Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Error response schema."""

    error: str
    details: str | None = None
    category: str | None = None
