"""Custom exception classes"""
from typing import Any, Optional


class AppException(Exception):
    """Base exception for application errors"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_type: str = "AppError",
        details: Optional[Any] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.details = details
        super().__init__(self.message)


class ValidationError(AppException):
    """Caller-correctable input error (sum mismatch, duplicate name, ...)"""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_type="ValidationError",
            details=details
        )


class NotFoundError(AppException):
    """Resource not found exception"""

    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=404,
            error_type="NotFoundError",
            details=details
        )


class AuthenticationError(AppException):
    """Caller identity missing or unknown"""

    def __init__(self, message: str = "Authentication failed", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=401,
            error_type="AuthenticationError",
            details=details
        )


class AuthorizationError(AppException):
    """Authorization/permission denied exception"""

    def __init__(self, message: str = "Permission denied", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=403,
            error_type="AuthorizationError",
            details=details
        )


class StateError(AppException):
    """Operation refused in the current state of the entry or group"""

    def __init__(self, message: str = "Operation not allowed", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=409,
            error_type="StateError",
            details=details
        )
