"""
Shared error handling for the Ping service.

Every error carries the HTTP status it maps to and knows how to render the
body the caller sees. Bodies keep the wire format clients already depend on
(``{"errorMessage": ...}`` or plain text), while the log record carries the
canonical code.
"""

from typing import Dict, Any, Optional, Union
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Canonical error record, used for logs and internal errors."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class PingServiceException(Exception):
    """Base exception for Ping service errors."""

    status_code: int = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        """Convert to the canonical error record."""
        return ErrorResponse(
            request_id=request_id,
            code=self.code,
            message=self.message,
            details=self.details
        )

    def to_body(self) -> Union[Dict[str, Any], str]:
        """Body returned to the caller."""
        return {"errorMessage": self.message}

    def headers(self) -> Dict[str, str]:
        """Extra response headers."""
        return {}


class AdmissionRejectedError(PingServiceException):
    """GET volume exceeded the admission threshold."""

    status_code = 429

    def __init__(self, message: str = "Too many requests", details: Optional[Dict[str, Any]] = None):
        super().__init__("ADMISSION_REJECTED", message, details)

    def to_body(self) -> str:
        return self.message


class ValidationError(PingServiceException):
    """Request body is well-formed but not acceptable."""

    status_code = 400

    def __init__(self, message: str = "Invalid Request", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class MalformedBodyError(PingServiceException):
    """Request body could not be parsed."""

    status_code = 400

    def __init__(self, message: str = "Malformed Request Body", details: Optional[Dict[str, Any]] = None):
        super().__init__("MALFORMED_BODY", message, details)


class MethodNotAllowedError(PingServiceException):
    """No handler exists for the request method."""

    status_code = 405

    def __init__(self, method: str, allowed: Optional[list] = None, message: str = "Method Not Allowed"):
        self.method = method
        self.allowed = list(allowed or [])
        super().__init__("METHOD_NOT_ALLOWED", message, {"method": method, "allowed": self.allowed})

    def headers(self) -> Dict[str, str]:
        return {"Allow": ", ".join(self.allowed)}
