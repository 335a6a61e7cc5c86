"""Input normalizer for building model input records.

Joins each caller-supplied device onto its service history and produces
the exact field set the hosted fault model expects:

- device_id: digits of the device code as an integer (0 when none)
- type, country_event, country_device, manufacturer_id, name, year,
  quantity_in_commerce: passed through verbatim
- reason, description: from the first matching service record, else "N/A"
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Any, Literal

from medtech_api.schemas import DeviceDescriptor, ModelInputRecord, ServiceRecord

logger = logging.getLogger(__name__)

MISSING_SENTINEL = "N/A"

_NON_DIGITS = re.compile(r"[^0-9]")


def numeric_device_key(device_code: Any) -> int:
    """Derive the numeric model key from a device code.

    Every non-digit character is stripped and the remainder parsed as an
    integer, so ``"VENT-004"`` gives 4. Codes without digits, absent
    codes and digit runs too long to parse give 0.
    """
    if device_code is None:
        return 0
    digits = _NON_DIGITS.sub("", str(device_code))
    if not digits:
        return 0
    try:
        return int(digits)
    except ValueError:
        # past the interpreter limit on integer string conversion
        return 0


def find_service_record(
    device_code: Any,
    records: Sequence[ServiceRecord],
) -> ServiceRecord | None:
    """Return the first record for the device code, or None.

    Duplicates are resolved by store order: first match wins.
    """
    if device_code is None:
        return None
    for record in records:
        if record.device_id == device_code:
            return record
    return None


def _or_sentinel(value: Any) -> Any:
    if value is None or value == "":
        return MISSING_SENTINEL
    return value


class InputNormalizer:
    """Builds model input records from devices and service records."""

    def __init__(self, match_field: Literal["deviceId", "id"] = "deviceId") -> None:
        """Initialize normalizer.

        Args:
            match_field: Descriptor field compared against ``ServiceRecord.deviceId``
        """
        self._match_field = match_field

    def _match_key(self, device: DeviceDescriptor) -> Any:
        if self._match_field == "id":
            return device.id
        return device.device_id

    def normalize_one(
        self,
        device: DeviceDescriptor,
        records: Sequence[ServiceRecord],
    ) -> ModelInputRecord:
        """Build the model input for a single device. Never fails."""
        record = find_service_record(self._match_key(device), records)
        return ModelInputRecord(
            device_id=numeric_device_key(device.device_id),
            type=device.type,
            country_event=device.country_event,
            country_device=device.country_device,
            manufacturer_id=device.manufacturer_id,
            name=device.name,
            year=device.year,
            quantity_in_commerce=device.quantity_in_commerce,
            reason=_or_sentinel(record.reason if record else None),
            description=_or_sentinel(record.description if record else None),
        )

    def normalize(
        self,
        devices: Sequence[DeviceDescriptor],
        records: Sequence[ServiceRecord],
    ) -> list[ModelInputRecord]:
        """Build one model input record per device, in input order.

        Args:
            devices: Caller-supplied device descriptors
            records: All known service records

        Returns:
            Model input records, same length and order as ``devices``
        """
        batch = [self.normalize_one(device, records) for device in devices]
        logger.debug(f"Normalized {len(batch)} devices against {len(records)} service records")
        return batch
