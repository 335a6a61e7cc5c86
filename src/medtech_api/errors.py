"""Error taxonomy shared by services and API routes.

Every failure raised inside a request pipeline is a ``MedTechError``
subclass. Routes catch them at the boundary and render the ``category``,
``message`` and ``status_code`` into a JSON error response.
"""

from __future__ import annotations


class MedTechError(Exception):
    """Base class for all handled service errors."""

    category = "InternalError"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequest(MedTechError):
    """Malformed or missing caller input. Not retryable."""

    category = "BadRequest"
    status_code = 400


class StoreUnavailable(MedTechError):
    """The service-record store could not be read."""

    category = "StoreUnavailable"


class ModelUnavailable(MedTechError):
    """The remote prediction service could not be reached or failed."""

    category = "ModelUnavailable"


class ModelResponseMalformed(MedTechError):
    """The remote prediction service answered with undecodable data."""

    category = "ModelResponseMalformed"


class PredictionCountMismatch(MedTechError):
    """Prediction count differs from the number of submitted devices."""

    category = "PredictionCountMismatch"

    def __init__(self, expected: int, received: int) -> None:
        super().__init__(f"Expected {expected} predictions from the model, received {received}")
        self.expected = expected
        self.received = received


class InternalError(MedTechError):
    """Anything unclassified."""


class IdentityProviderError(MedTechError):
    """Account provisioning in the identity service failed."""

    category = "IdentityProviderError"


class EmailDeliveryError(MedTechError):
    """Outbound email could not be sent."""

    category = "EmailDeliveryError"
