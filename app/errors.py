"""
Typed API errors and the centralized responder that renders them.

Services raise a ``PostAPIError`` subclass and never build HTTP responses
themselves; ``register_error_handlers`` converts every error that escapes
a route into the JSON body the frontend displays verbatim::

    {"success": false, "statusCode": 403, "message": "..."}
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class PostAPIError(Exception):
    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequest(PostAPIError):
    status_code = 400
    default_message = "Bad Request"


class Unauthorized(PostAPIError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(PostAPIError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(PostAPIError):
    status_code = 404
    default_message = "Not Found"


class StoreError(PostAPIError):
    """Uniqueness violation or any other persistence failure."""

    status_code = 500
    default_message = "Post could not be saved"


def error_body(status_code: int, message: str) -> dict:
    return {"success": False, "statusCode": status_code, "message": message}


def _respond(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_body(status_code, message))


async def _handle_api_error(request: Request, exc: PostAPIError) -> JSONResponse:
    return _respond(exc.status_code, exc.message)


async def _handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc.orig)
    return _respond(StoreError.status_code, StoreError.default_message)


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _respond(500, "Internal Server Error")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PostAPIError, _handle_api_error)
    app.add_exception_handler(IntegrityError, _handle_integrity_error)
    app.add_exception_handler(Exception, _handle_unexpected)
