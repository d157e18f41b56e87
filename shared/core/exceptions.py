# ================================
# CUSTOM EXCEPTIONS (core/exceptions.py)
# ================================
from typing import List, Optional

from shared.utils.app_status_code import AppStatusCode


class AppException(Exception):
    """Base exception for recoverable application errors."""

    def __init__(self, detail: str, status_code: int = 400, error_code: str = AppStatusCode.OPERATION_FAILED):
        self.detail = detail
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(detail)


class ValidationError(AppException):
    """Malformed request or override input. Nothing is persisted."""

    def __init__(self, detail: str, field: Optional[str] = None,
                 error_code: str = AppStatusCode.REQUIRED_VALIDATION_ERROR):
        self.field = field
        super().__init__(detail, 422, error_code)


class UnauthorizedError(AppException):
    """Actor lacks the capability for the attempted stage transition."""

    def __init__(self, detail: str = "Access denied", error_code: str = AppStatusCode.UNAUTHORIZED_ACTION):
        super().__init__(detail, 403, error_code)


class InvalidStateError(AppException):
    """Transition attempted from a stage that does not permit it."""

    def __init__(self, detail: str, current_status: Optional[str] = None,
                 error_code: str = AppStatusCode.INVALID_STATE):
        self.current_status = current_status
        super().__init__(detail, 409, error_code)


class ConflictError(AppException):
    """Approving an override would overlap another approved override."""

    def __init__(self, detail: str, conflicting_ids: Optional[List] = None,
                 error_code: str = AppStatusCode.OVERRIDE_CONFLICT):
        self.conflicting_ids = list(conflicting_ids or [])
        super().__init__(detail, 409, error_code)


class NotFoundError(AppException):
    def __init__(self, detail: str, error_code: str = AppStatusCode.NOT_FOUND):
        super().__init__(detail, 404, error_code)
