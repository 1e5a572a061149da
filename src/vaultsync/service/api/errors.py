"""
API errors for the storage facade and the webhook service.

Handlers raise these; the error middleware turns them into
``{"error": {"code", "message", "details"?, "request_id"}}`` responses.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    # 4xx
    INVALID_REQUEST = "INVALID_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_KEY = "INVALID_KEY"
    OBJECT_NOT_FOUND = "OBJECT_NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    SYNC_IN_PROGRESS = "SYNC_IN_PROGRESS"

    # 5xx
    INTERNAL_ERROR = "INTERNAL_ERROR"
    STORAGE_ERROR = "STORAGE_ERROR"


class APIError(Exception):
    """
    Error with an HTTP status and a machine-readable code.

    Subclasses set ``code`` and ``status``; callers only supply the message.
    """

    code: ErrorCode = ErrorCode.INVALID_REQUEST
    status: int = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self, request_id: str | None = None) -> dict[str, Any]:
        body: dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.details:
            body["details"] = self.details
        if request_id:
            body["request_id"] = request_id
        return {"error": body}


class ValidationError(APIError):
    code = ErrorCode.VALIDATION_ERROR


class NotFoundError(APIError):
    code = ErrorCode.OBJECT_NOT_FOUND
    status = 404

    def __init__(self, key: str):
        super().__init__(f"Object '{key}' not found", details={"key": key})


class UnauthorizedError(APIError):
    code = ErrorCode.UNAUTHORIZED
    status = 401

    def __init__(self, message: str = "Missing or invalid sync token"):
        super().__init__(message)


class ConflictError(APIError):
    code = ErrorCode.SYNC_IN_PROGRESS
    status = 409
