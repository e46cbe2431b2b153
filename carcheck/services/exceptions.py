# carcheck/services/exceptions.py
"""
Error taxonomy for the vehicle check pipeline.

Every error here is caller-recoverable (retry or correct the input).
GovApiError subclasses come from the DVLA client; ResolutionError is the
narrowed form the orchestrator hands back to callers.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    INVALID_REGISTRATION = "InvalidRegistrationError"
    INVALID_TIER = "InvalidTierError"
    NOT_FOUND = "NotFoundError"
    INVALID_REQUEST = "InvalidRequest"
    SERVICE_UNAVAILABLE = "ServiceUnavailable"
    NETWORK_FAILURE = "NetworkFailure"
    UNKNOWN_API_ERROR = "UnknownApiError"
    SUPERSEDED = "Superseded"


class VehicleCheckError(Exception):
    """Base class for all expected vehicle check failures."""

    kind: ErrorKind = ErrorKind.UNKNOWN_API_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class InvalidRegistrationError(VehicleCheckError):
    """Malformed VRM. Raised (or returned) before any network call."""
    kind = ErrorKind.INVALID_REGISTRATION


class InvalidTierError(VehicleCheckError):
    """Tier value outside basic/silver/gold. The write is rejected."""
    kind = ErrorKind.INVALID_TIER


class VehicleNotFoundError(VehicleCheckError):
    """Vehicle absent from the fixture store."""
    kind = ErrorKind.NOT_FOUND


class GovApiError(VehicleCheckError):
    """Base class for DVLA Vehicle Enquiry Service failures."""


class GovNotFoundError(GovApiError):
    kind = ErrorKind.NOT_FOUND


class GovInvalidRequestError(GovApiError):
    kind = ErrorKind.INVALID_REQUEST


class GovServiceUnavailableError(GovApiError):
    kind = ErrorKind.SERVICE_UNAVAILABLE


class GovNetworkFailureError(GovApiError):
    kind = ErrorKind.NETWORK_FAILURE


class GovUnknownApiError(GovApiError):
    kind = ErrorKind.UNKNOWN_API_ERROR


class ResolutionError(VehicleCheckError):
    """Failure of one lookup, tagged with the kind of the underlying error."""

    def __init__(self, kind: ErrorKind, message: str, status_code: Optional[int] = None):
        super().__init__(message, status_code)
        self.kind = kind

    @classmethod
    def from_error(cls, error: VehicleCheckError) -> "ResolutionError":
        return cls(error.kind, error.message, error.status_code)

    def __repr__(self):
        return f"<ResolutionError {self.kind.value} status={self.status_code} message={self.message!r}>"
