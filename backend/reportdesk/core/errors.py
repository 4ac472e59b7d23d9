"""
Structured error taxonomy for the report lifecycle.

Every failure the service can produce is a ``ReportDeskError`` carrying an
error code, a message, optional details and the HTTP status the API layer
should answer with.

    raise NotFound(f"Report {report_id} does not exist",
                   details={"report_id": report_id})
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    REPORT_NOT_FOUND = "REPORT_001"
    REPORT_INVALID_STATE = "REPORT_002"
    AUTH_PASSWORD_MISMATCH = "AUTH_001"
    REQUEST_INVALID = "REQUEST_001"
    DB_OPERATION_FAILED = "DB_001"


class ReportDeskError(Exception):
    """
    Base exception for lifecycle failures.

    Attributes:
        code: ErrorCode enum value
        message: Human-readable error message
        details: Extra context for the client (never secrets)
        http_status: Status code the API layer answers with
    """

    default_code: ErrorCode = ErrorCode.DB_OPERATION_FAILED
    http_status: int = 500

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        code: Optional[ErrorCode] = None,
    ):
        self.code = code or self.default_code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{self.code.value}] {message}")

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": {
                "code": self.code.value,
                "name": self.name,
                "message": self.message,
                "details": self.details,
            }
        }


class NotFound(ReportDeskError):
    default_code = ErrorCode.REPORT_NOT_FOUND
    http_status = 404


class Unauthorized(ReportDeskError):
    default_code = ErrorCode.AUTH_PASSWORD_MISMATCH
    http_status = 401


class InvalidState(ReportDeskError):
    default_code = ErrorCode.REPORT_INVALID_STATE
    http_status = 409


class ValidationFailure(ReportDeskError):
    default_code = ErrorCode.REQUEST_INVALID
    http_status = 400


class PersistenceFailure(ReportDeskError):
    default_code = ErrorCode.DB_OPERATION_FAILED
    http_status = 500


def wrap_persistence_error(error: Exception, context: Optional[str] = None) -> ReportDeskError:
    """
    Convert an unexpected store exception into a ``PersistenceFailure``.

    Domain errors raised by the store are returned unchanged so their kind
    survives to the HTTP layer.
    """
    if isinstance(error, ReportDeskError):
        return error

    message = str(error) or type(error).__name__
    if context:
        message = f"{context}: {message}"

    return PersistenceFailure(
        message,
        details={
            "original_type": type(error).__name__,
            "original_message": str(error),
        },
    )


__all__ = [
    "ErrorCode",
    "ReportDeskError",
    "NotFound",
    "Unauthorized",
    "InvalidState",
    "ValidationFailure",
    "PersistenceFailure",
    "wrap_persistence_error",
]
