"""
Custom exceptions for the Taskflow board API
"""
from typing import Optional, Dict, Any


class APIException(Exception):
    """Base API exception class"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "SYS_001",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(APIException):
    """No authenticated identity on the request"""

    def __init__(self, message: str = "Unauthorized", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTH_001",
            details=details
        )


class InsufficientPermissionsError(APIException):
    """Authenticated, but the board role does not allow the mutation"""

    def __init__(self, message: str = "Forbidden", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=403,
            error_code="AUTH_003",
            details=details
        )


class ValidationError(APIException):
    """Validation error"""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="VAL_001",
            details=details
        )


class ResourceNotFoundError(APIException):
    """Resource not found error"""

    def __init__(self, resource: str = "Resource", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"{resource} not found",
            status_code=404,
            error_code="BIZ_001",
            details=details
        )


class DuplicateResourceError(APIException):
    """Duplicate resource error"""

    def __init__(self, resource: str = "Resource", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"{resource} already exists",
            status_code=409,
            error_code="BIZ_002",
            details=details
        )


class TransientFailureError(APIException):
    """Network or infrastructure failure; retrying the gesture may succeed"""

    def __init__(self, message: str = "Service temporarily unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=503,
            error_code="SYS_002",
            details=details
        )
