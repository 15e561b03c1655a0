from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.core.exceptions import CustomException
from app.core.logging import request_logger

def _error_response(status_code: int, detail, error_type: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "detail": detail,
            "status_code": status_code,
            "type": error_type
        }
    )

def setup_error_handlers(app: FastAPI) -> None:
    """Configure error handlers for the application."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Handle HTTP exceptions."""
        return _error_response(exc.status_code, exc.detail, "http_error")

    @app.exception_handler(CustomException)
    async def custom_exception_handler(request: Request, exc: CustomException) -> JSONResponse:
        """Handle service-level exceptions."""
        request_logger.warning(
            "Service error",
            extra={
                "error": str(exc.detail),
                "error_type": exc.__class__.__name__,
                "path": request.url.path
            }
        )
        return _error_response(exc.status_code, exc.detail, "service_error")

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        """Handle ValueError exceptions."""
        request_logger.error(
            "ValueError occurred",
            extra={
                "error": str(exc),
                "error_type": "ValueError",
                "path": request.url.path
            },
            exc_info=True
        )
        return _error_response(status.HTTP_400_BAD_REQUEST, str(exc), "value_error")

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Handle request validation errors."""
        return _error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            jsonable_errors(exc),
            "validation_error"
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle all other exceptions."""
        request_logger.error(
            "Unhandled exception",
            extra={
                "error": str(exc),
                "error_type": exc.__class__.__name__,
                "path": request.url.path
            },
            exc_info=True
        )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            "server_error"
        )

def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors with non-serializable context stripped."""
    errors = []
    for error in exc.errors():
        error = dict(error)
        error.pop("ctx", None)
        error.pop("input", None)
        errors.append(error)
    return errors
