import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppException(Exception):
    kind = "AppError"
    default_status = 400

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code or self.default_status
        super().__init__(message)


class NotFound(AppException):
    kind = "NotFound"
    default_status = 404


class DuplicateEntry(AppException):
    kind = "DuplicateEntry"
    default_status = 409


class Conflict(AppException):
    kind = "Conflict"
    default_status = 409


class NotEnded(AppException):
    kind = "NotEnded"
    default_status = 400


class NoEntries(AppException):
    kind = "NoEntries"
    default_status = 400


class ValidationError(AppException):
    kind = "ValidationError"
    default_status = 422


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppException)
    async def _app_exception_handler(_: Request, exc: AppException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.message, "error": exc.kind},
        )

    @app.exception_handler(RequestValidationError)
    async def _request_validation_handler(_: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={
                "message": "Invalid request payload",
                "error": ValidationError.kind,
                "detail": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"message": "Internal server error"},
        )
