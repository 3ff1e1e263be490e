"""
Gateway Errors and Response Envelope.

Every failure the gateway reports to a caller is a GatewayError carrying
a stable machine-readable code and the HTTP status it maps to. The
envelope helpers produce the uniform response body used for both
success and error responses:

    {"success": bool, "message": str, "data": Any?, "error": str?}
"""

from typing import Any, Dict, List, Optional


class ErrorCode:
    """Stable error codes exposed to callers."""

    UNAUTHORIZED = "UNAUTHORIZED"
    BAD_REQUEST = "BAD_REQUEST"
    NOT_FOUND = "NOT_FOUND"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class GatewayError(Exception):
    """Base exception for errors surfaced to the caller."""

    code: str = ErrorCode.INTERNAL_ERROR
    status_code: int = 500

    def __init__(
        self,
        message: str,
        details: Optional[Any] = None,
        status_code: Optional[int] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_envelope(self) -> Dict[str, Any]:
        """Convert to the uniform response envelope."""
        return error_envelope(self.message, self.code, self.details)


class UnauthorizedError(GatewayError):
    """Missing or invalid caller credential."""

    code = ErrorCode.UNAUTHORIZED
    status_code = 401


class BadRequestError(GatewayError):
    """Missing required fields or malformed input."""

    code = ErrorCode.BAD_REQUEST
    status_code = 400


class NotFoundError(GatewayError):
    """A catalog entity or provider secret could not be found."""

    code = ErrorCode.NOT_FOUND
    status_code = 404


class ConfigurationError(GatewayError):
    """Catalog data is present but unusable at dispatch time."""

    code = ErrorCode.CONFIGURATION_ERROR
    status_code = 500


class ProviderError(GatewayError):
    """The upstream provider failed or answered with a non-2xx status."""

    code = ErrorCode.PROVIDER_ERROR
    status_code = 502

    def __init__(
        self,
        message: str,
        upstream_status: Optional[int] = None,
        upstream_body: Optional[str] = None
    ):
        super().__init__(
            message,
            details={"status_code": upstream_status, "body": upstream_body},
        )
        self.upstream_status = upstream_status
        self.upstream_body = upstream_body


class MappingValidationError(GatewayError):
    """
    Schema or mapping validation failed.

    Carries every offense found so an operator can fix them in one pass.
    """

    code = ErrorCode.VALIDATION_ERROR
    status_code = 400

    def __init__(self, message: str, errors: List[str]):
        super().__init__(message, details={"errors": list(errors)})
        self.errors = list(errors)


def success_envelope(data: Any, message: str = "Success") -> Dict[str, Any]:
    return {"success": True, "message": message, "data": data}


def error_envelope(
    message: str,
    code: str,
    details: Optional[Any] = None
) -> Dict[str, Any]:
    envelope: Dict[str, Any] = {"success": False, "message": message, "error": code}
    if details is not None:
        envelope["data"] = details
    return envelope
