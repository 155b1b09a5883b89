"""
Custom exception classes for the application
"""
from typing import Optional, Dict, Any


class ConvertiaException(Exception):
    """Base exception for the Convert-IA backend"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(ConvertiaException):
    """Authentication related errors"""

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=401, details=details)


class AuthorizationError(ConvertiaException):
    """Authorization/permission errors"""

    def __init__(self, message: str = "Insufficient permissions", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=403, details=details)


class NotFoundError(ConvertiaException):
    """Resource not found errors"""

    def __init__(self, resource: str, identifier: Optional[str] = None):
        message = f"{resource} not found"
        if identifier:
            message += f": {identifier}"
        super().__init__(message, status_code=404)


class ValidationError(ConvertiaException):
    """Validation errors"""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=422, details=details)


class BadRequestError(ConvertiaException):
    """Malformed or incomplete request"""

    def __init__(self, message: str = "Bad request", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=400, details=details)


class ConflictError(ConvertiaException):
    """Request conflicts with the current state of a resource"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=409, details=details)


class InvalidTransitionError(ConflictError):
    """Application status change not allowed by the workflow"""

    def __init__(self, current: str, requested: str, allowed: Optional[list] = None):
        super().__init__(
            f"Cannot move application from '{current}' to '{requested}'",
            details={"current": current, "requested": requested, "allowed": allowed or []},
        )


class TrainingCodeError(ConvertiaException):
    """Training code is missing, unknown or expired"""

    STATUS_BY_REASON = {"missing": 400, "not_found": 404, "expired": 400}

    def __init__(self, reason: str, message: str):
        self.reason = reason
        super().__init__(
            message,
            status_code=self.STATUS_BY_REASON.get(reason, 400),
            details={"reason": reason},
        )


class AIEngineError(ConvertiaException):
    """AI engine related errors"""

    def __init__(self, message: str = "AI processing failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=500, details=details)
