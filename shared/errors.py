"""
Shared error handling for the Aplos token sidecar.

Every failure that reaches the request boundary is a ``SidecarException``.
The exception carries its own HTTP status; ``details`` are for logs only
and never leave the process.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: str


class SidecarException(Exception):
    """Base exception for sidecar services."""

    status_code: int = 500

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.headers: Dict[str, str] = {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(error=self.message)


class ConfigurationError(SidecarException):
    """Missing or unusable configuration (keys, client id)."""

    status_code = 500

    def __init__(self, message: str = "Service not configured", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class ValidationError(SidecarException):
    """Validation-related errors."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class PayloadTooLargeError(ValidationError):
    """Request body exceeded the configured ceiling."""

    def __init__(self, message: str = "Request body too large", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.code = "PAYLOAD_TOO_LARGE"
        self.headers["Connection"] = "close"


class TokenDecodeError(ValidationError):
    """Ciphertext was not valid base64."""

    def __init__(self, message: str = "encrypted_token is not valid base64", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.code = "TOKEN_DECODE_ERROR"


class AuthenticationError(SidecarException):
    """Authentication-related errors."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHENTICATION_ERROR", message, details)


class ForbiddenError(SidecarException):
    """Caller is outside the network perimeter."""

    status_code = 403

    def __init__(self, message: str = "Forbidden", details: Optional[Dict[str, Any]] = None):
        super().__init__("FORBIDDEN", message, details)


class RateLimitError(SidecarException):
    """Rate limiting errors."""

    status_code = 429

    def __init__(self, message: str = "Too many requests", retry_after: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__("RATE_LIMIT_ERROR", message, details)
        if retry_after is not None:
            self.headers["Retry-After"] = str(retry_after)


class UpstreamError(SidecarException):
    """Vendor API failures: bad status, timeout, malformed body."""

    status_code = 502

    def __init__(self, message: str = "Upstream error", details: Optional[Dict[str, Any]] = None):
        super().__init__("UPSTREAM_ERROR", message, details)


class DecryptionError(SidecarException):
    """Every padding scheme failed. The message stays generic."""

    status_code = 500

    def __init__(self, message: str = "Failed to decrypt token", details: Optional[Dict[str, Any]] = None):
        super().__init__("DECRYPTION_ERROR", message, details)
