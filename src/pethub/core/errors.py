from typing import Any


class PetHubError(Exception):
    """Base class for errors surfaced to API callers with a stable kind."""

    kind = "Error"
    status_code = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class Unauthorized(PetHubError):
    kind = "Unauthorized"
    status_code = 401


class Forbidden(PetHubError):
    kind = "Forbidden"
    status_code = 403


class NotFound(PetHubError):
    kind = "NotFound"
    status_code = 404


class DuplicateRequest(PetHubError):
    kind = "DuplicateRequest"
    status_code = 409


class InvalidTransition(PetHubError):
    kind = "InvalidTransition"
    status_code = 409


class PaymentNotCaptured(PetHubError):
    kind = "PaymentNotCaptured"
    status_code = 402


class InvalidAmount(PetHubError):
    kind = "InvalidAmount"
    status_code = 422


class InconsistentState(PetHubError):
    """
    A cross-entity invariant does not hold after a write. `details` names the
    ids involved so the records can be reconciled.
    """
    kind = "InconsistentState"
    status_code = 500


class PaymentGatewayError(PetHubError):
    kind = "PaymentGatewayError"
    status_code = 502
