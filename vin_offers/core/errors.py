"""Exception hierarchy mapped to HTTP responses in ``vin_offers.main``."""

from enum import Enum


class OfferLookupError(Exception):
    """Base class for every error the API turns into a JSON response."""

    status_code = 500
    public_message = "Error interno"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class VINReason(str, Enum):
    """Why a VIN was rejected."""

    EMPTY_INPUT = "empty_input"
    WRONG_LENGTH = "wrong_length"
    INVALID_CHARACTERS = "invalid_characters"


_VIN_MESSAGES = {
    VINReason.EMPTY_INPUT: "Ingrese un VIN.",
    VINReason.WRONG_LENGTH: "El VIN debe tener 17 caracteres.",
    VINReason.INVALID_CHARACTERS: "VIN inválido.",
}


class VINValidationError(OfferLookupError):
    """Malformed VIN; the user can fix it."""

    status_code = 400

    def __init__(self, reason: VINReason):
        super().__init__(_VIN_MESSAGES[reason])
        self.reason = reason


class OffersNotFoundError(OfferLookupError):
    """No warehouse row for the VIN. A valid outcome, not a fault."""

    status_code = 404
    public_message = "No se encontraron ofertas para el VIN proporcionado."

    def __init__(self, vin: str):
        super().__init__()
        self.vin = vin


class AuthError(OfferLookupError):
    """Missing, invalid or wrong-domain credentials."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


class InvalidTokenError(Exception):
    """Raised by token verifiers when a token fails verification."""


class UpstreamError(OfferLookupError):
    """Warehouse or identity provider call failed.

    ``detail`` is the generic text returned to the caller; the underlying
    exception is only logged.
    """

    status_code = 500

    def __init__(self, detail: str):
        super().__init__()
        self.detail = detail
