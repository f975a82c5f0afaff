"""Error types raised by the service layer.

Every error carries the HTTP status it maps to; ``main`` renders them as
``{"success": false, "error": {...}}`` bodies.
"""
from typing import Any


class DMSError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"message": self.message, "code": self.code}
        if self.details:
            error["details"] = self.details
        return {"success": False, "error": error}


class ValidationError(DMSError):
    status_code = 400
    code = "validation_error"


class AuthenticationError(DMSError):
    status_code = 401
    code = "unauthenticated"


class PermissionDeniedError(DMSError):
    status_code = 403
    code = "forbidden"

    def __init__(self, message: str = "Insufficient permissions", required_permissions: list[str] | None = None):
        details = {"required_permissions": required_permissions} if required_permissions else None
        super().__init__(message, details=details)


class NotFoundError(DMSError):
    status_code = 404
    code = "not_found"


class ConflictError(DMSError):
    status_code = 409
    code = "conflict"


class ThrottledError(DMSError):
    status_code = 429
    code = "too_many_attempts"

    def __init__(self, retry_after_seconds: float):
        super().__init__(
            "Too many failed attempts",
            details={"retry_after_seconds": round(retry_after_seconds, 1)},
        )
        self.retry_after_seconds = retry_after_seconds
