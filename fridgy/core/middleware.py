from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException, WebSocketException
from starlette.middleware.base import BaseHTTPMiddleware
import logging
from typing import Sequence, Any

from fridgy.schemas.result import Error, Result, ErrorCategory
from fridgy.core.exception import CustomException
from fridgy.core.state import DEFAULT_ERROR_MESSAGE

logger = logging.getLogger(__name__)


class ExceptionHandlingMiddleware(BaseHTTPMiddleware):
    """
    Turns anything a route lets escape into a ``Result.failure`` body.

    Application errors keep their own status and category. Anything else is
    logged with the request line and reported as a generic 500, so Firestore
    and Storage error text never reaches clients.
    """

    def __init__(self, app, log_internal_errors: bool = True):
        super().__init__(app)
        self.log_internal_errors = log_internal_errors
        self._register_handlers()

    def _register_handlers(self):
        """Exception type to handler, checked in insertion order"""
        self.EXCEPTION_HANDLERS = {
            CustomException: self._handle_custom_exception,
            ValidationError: self._handle_validation_error,
            RequestValidationError: self._handle_validation_error,
            ResponseValidationError: self._handle_validation_error,
            HTTPException: self._handle_http_exception,
            WebSocketException: self._handle_websocket_exception,
        }

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as ex:
            return await self._handle_exception(ex, request)

    async def _handle_exception(self, ex: Exception, request: Request) -> JSONResponse:
        for exc_type, handler in self.EXCEPTION_HANDLERS.items():
            if isinstance(ex, exc_type):
                return await handler(ex, request)

        return await self._handle_unhandled_exception(ex, request)

    async def _handle_custom_exception(
        self, ex: CustomException, request: Request
    ) -> JSONResponse:
        if ex.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, ex.detail)
        else:
            logger.info("%s %s rejected (%s): %s", request.method, request.url.path, ex.status_code, ex.detail)
        return create_error_response(error_from_custom_exception(ex))

    async def _handle_validation_error(
        self,
        ex: ValidationError | RequestValidationError | ResponseValidationError,
        request: Request,
    ) -> JSONResponse:
        if isinstance(ex, ResponseValidationError):
            # A stored document that no longer fits its model.
            logger.error("Response validation failed on %s: %s", request.url.path, ex.errors())
        return create_error_response(validation_error(ex.errors()))

    async def _handle_http_exception(
        self, ex: HTTPException, request: Request
    ) -> JSONResponse:
        return create_error_response(error_from_http_exception(ex))

    async def _handle_websocket_exception(
        self, ex: WebSocketException, request: Request
    ) -> JSONResponse:
        error = Error(
            message=str(ex.reason) if ex.reason else "Item stream closed",
            status_code=400,
            category=ErrorCategory.WEBSOCKET,
        )
        return create_error_response(error)

    async def _handle_unhandled_exception(
        self, ex: Exception, request: Request
    ) -> JSONResponse:
        if self.log_internal_errors:
            logger.error(
                "Unhandled exception on %s %s",
                request.method,
                request.url.path,
                exc_info=ex,
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "client": request.client.host if request.client else None,
                },
            )

        return create_error_response(Error.internal(DEFAULT_ERROR_MESSAGE))


def register_exception_handlers(app: FastAPI) -> None:
    """
    Route HTTP and validation errors through the Result envelope.

    Starlette resolves HTTPException subclasses (including unknown routes)
    inside the router, before BaseHTTPMiddleware sees them, so they need
    app-level handlers as well.
    """

    async def custom_exception_handler(request: Request, ex: CustomException):
        return create_error_response(error_from_custom_exception(ex))

    async def http_exception_handler(request: Request, ex: HTTPException):
        return create_error_response(error_from_http_exception(ex))

    async def validation_exception_handler(request: Request, ex: RequestValidationError):
        return create_error_response(validation_error(ex.errors()))

    app.add_exception_handler(CustomException, custom_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)


def error_from_custom_exception(ex: CustomException) -> Error:
    return Error(message=str(ex.detail), status_code=ex.status_code, category=ex.category)


def error_from_http_exception(ex: HTTPException) -> Error:
    return Error(
        message=ex.detail if isinstance(ex.detail, str) else str(ex.detail),
        status_code=ex.status_code,
        category=ErrorCategory.from_status_code(ex.status_code),
    )


def validation_error(errors: Sequence[Any]) -> Error:
    return Error(
        message=format_validation_error(errors),
        status_code=422,
        category=ErrorCategory.VALIDATION,
    )


def create_error_response(error: Error) -> JSONResponse:
    """Serialize an Error as a failed Result with the error's status code"""
    headers = {"WWW-Authenticate": "Bearer"} if error.status_code == 401 else None
    return JSONResponse(
        status_code=error.status_code,
        content=Result.failure(error).model_dump(mode="json"),
        headers=headers,
    )


def format_validation_error(errors: Sequence[Any]) -> str:
    """
    One readable line per pydantic error, e.g.
    ``body -> quantity: Input should be greater than or equal to 1``.
    """
    messages = []
    for error in errors:
        loc = " -> ".join(str(part) for part in error.get("loc", ()))
        msg = error.get("msg", "Invalid value")
        messages.append(f"{loc}: {msg}" if loc else msg)

    return "; ".join(messages) if messages else "Invalid request"
