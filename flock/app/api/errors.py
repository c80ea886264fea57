# flock/app/api/errors.py
"""
The single boundary where failures become responses.

Whatever goes wrong below, the client receives one ErrorResponse body
{"status", "code", "message"} with the matching HTTP status, never a stack
trace or a collaborator's own error shape.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from flock.app.core.errors import ApiError, ErrorKind, StorageError, invalid_request
from flock.app.schemas.error import ErrorResponse

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    404: "notFound",
    405: "methodNotAllowed",
}


def error_response(error: ApiError) -> JSONResponse:
    body = ErrorResponse(status=error.status, code=error.code, message=error.message)
    return JSONResponse(body.model_dump(), status_code=error.status)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.kind is ErrorKind.UPSTREAM:
        logger.warning("%s %s failed upstream: %s %s", request.method, request.url.path, exc.status, exc.code)
    else:
        logger.debug("%s %s rejected: %s", request.method, request.url.path, exc.code)
    return error_response(exc)


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    return await api_error_handler(request, ApiError.from_storage(exc))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(invalid_request("Invalid request parameters"))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error = ApiError(
        exc.status_code,
        HTTP_ERROR_CODES.get(exc.status_code, "httpError"),
        str(exc.detail),
        ErrorKind.NOT_FOUND if exc.status_code == 404 else ErrorKind.VALIDATION,
    )
    response = error_response(error)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(ApiError(500, "internalError", "Internal server error", ErrorKind.INTERNAL))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
