"""VIN format validation (ISO 3779 alphabet, no check-digit math)."""

import re

from vin_offers.core.errors import VINReason, VINValidationError

VIN_LENGTH = 17

# Letters I, O and Q are never used in a VIN
VIN_PATTERN = re.compile(r"^[A-HJ-NPR-Z0-9]{17}$", re.IGNORECASE)


def validate_vin(value: str | None) -> str:
    """Return the trimmed, uppercased VIN or raise VINValidationError."""
    vin = (value or "").strip().upper()
    if not vin:
        raise VINValidationError(VINReason.EMPTY_INPUT)
    if len(vin) != VIN_LENGTH:
        raise VINValidationError(VINReason.WRONG_LENGTH)
    if not VIN_PATTERN.match(vin):
        raise VINValidationError(VINReason.INVALID_CHARACTERS)
    return vin

