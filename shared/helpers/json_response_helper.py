from typing import Any

from shared.utils.app_status_code import AppStatusCode
from shared.core.schemas import JsonOutResult


def failure_response(message: str, status_code: str = AppStatusCode.OPERATION_FAILED, errors: Any = None):
    return JsonOutResult(
        data=None,
        status="Failure",
        status_code=status_code,
        message=message,
        errors=errors
    )
