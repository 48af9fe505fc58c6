"""
Error taxonomy and FastAPI exception handlers.
Every error response body is {"message": "..."}
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class RecipeHubError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(RecipeHubError):
    status_code = 400
    default_message = "Invalid input"


class AuthError(RecipeHubError):
    status_code = 403
    default_message = "Invalid token"


class InvalidCredentialsError(AuthError):
    status_code = 401
    default_message = "Invalid credentials"


class NotFoundError(RecipeHubError):
    status_code = 404
    default_message = "Not found"


class AuthorizationError(RecipeHubError):
    status_code = 403
    default_message = "You are not allowed to perform this action"


class StorageError(RecipeHubError):
    status_code = 500
    default_message = "Server error"


def _message_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def register_exception_handlers(app: FastAPI, debug: bool = False) -> None:
    @app.exception_handler(RecipeHubError)
    async def recipehub_error_handler(request: Request, exc: RecipeHubError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return _message_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return _message_response(exc.status_code, message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
            message = f"{field}: {first.get('msg')}" if field else first.get("msg")
        else:
            message = "Invalid request"
        return _message_response(400, message)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error")
        message = str(exc) if debug else "Internal server error"
        return _message_response(500, message)
