"""Re-attach caller identity to model predictions.

The hosted model does not echo device identity, so predictions are
correlated with devices by position only. A count mismatch is an error;
results are never truncated or padded.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from medtech_api.errors import PredictionCountMismatch
from medtech_api.schemas import DeviceDescriptor


def reconcile(
    raw: Sequence[Mapping[str, Any]],
    devices: Sequence[DeviceDescriptor],
) -> list[dict[str, Any]]:
    """Merge each prediction with its device's ``id`` and ``deviceId``.

    Identity fields always replace anything the model echoed. A device
    without an ``id`` or ``deviceId`` gets no such key in its result.

    Args:
        raw: Per-device predictions in submission order
        devices: The devices that were submitted

    Returns:
        Predictions with identity fields attached, in device order

    Raises:
        PredictionCountMismatch: If ``len(raw) != len(devices)``
    """
    if len(raw) != len(devices):
        raise PredictionCountMismatch(expected=len(devices), received=len(raw))

    return [_attach_identity(prediction, device) for prediction, device in zip(raw, devices)]


def _attach_identity(prediction: Mapping[str, Any], device: DeviceDescriptor) -> dict[str, Any]:
    merged = dict(prediction)
    for key, value in (("id", device.id), ("deviceId", device.device_id)):
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    return merged
