import logging

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder

from shared.core.exceptions import AppException, ConflictError, InvalidStateError, ValidationError
from shared.helpers.json_response_helper import failure_response
from shared.utils.app_status_code import AppStatusCode

logger = logging.getLogger(__name__)


def _error_details(exc: AppException):
    if isinstance(exc, ValidationError) and exc.field:
        return {"field": exc.field}
    if isinstance(exc, ConflictError):
        return {"conflicting_ids": [str(i) for i in exc.conflicting_ids]}
    if isinstance(exc, InvalidStateError) and exc.current_status:
        return {"current_status": exc.current_status}
    return None


def setup_exception_handlers(app: FastAPI):

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        logger.info("%s %s failed: %s", request.method, request.url.path, exc.detail)
        wrapped = failure_response(
            message=exc.detail,
            status_code=exc.error_code,
            errors=_error_details(exc)
        ).model_dump()
        return JSONResponse(content=jsonable_encoder(wrapped), status_code=exc.status_code)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        wrapped = failure_response(
            message=str(exc.detail),
            status_code=AppStatusCode.OPERATION_FAILED
        ).model_dump()
        return JSONResponse(content=wrapped, status_code=exc.status_code or 400)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        wrapped = failure_response(
            message="Invalid request payload",
            status_code=AppStatusCode.INVALID_INPUT,
            errors=jsonable_encoder(exc.errors())
        ).model_dump()
        return JSONResponse(content=wrapped, status_code=422)

    # Catch all unhandled exceptions
    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        wrapped = failure_response(
            message="Internal server error",
            status_code=AppStatusCode.OPERATION_ERROR
        ).model_dump()
        return JSONResponse(content=wrapped, status_code=500)
