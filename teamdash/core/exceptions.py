from typing import Any, Dict, List, Optional


class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Any] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class UpstreamError(AppException):
    """The data platform rejected a call or could not be reached.

    ``details`` holds the raw upstream body so callers can diagnose it.
    """
    def __init__(self, message: str, status_code: int = 400, body: Any = None):
        super().__init__(
            message=message,
            status_code=status_code,
            error_code="UPSTREAM_FAILURE",
            details=body
        )


class NotFoundError(AppException):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND"
        )


class AuthenticationError(AppException):
    def __init__(self, message: str = "Unauthorized", body: Any = None):
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTH_FAILED",
            details=body
        )


class FieldValidationError(AppException):
    """Validation failure raised from inside a handler (e.g. upload size)."""
    def __init__(self, errors: Dict[str, List[str]]):
        self.errors = errors
        super().__init__(
            message="The given data was invalid.",
            status_code=422,
            error_code="VALIDATION_FAILED"
        )
