from fastapi import HTTPException, status
from typing import Any

class ResourceNotFound(HTTPException):
    """Exception raised when a requested resource is not found."""
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail
        )

class ValidationError(HTTPException):
    """Exception raised when input validation fails."""
    def __init__(self, detail: str = "Validation error"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail
        )

class CustomException(Exception):
    """Base class for custom exceptions."""
    def __init__(
        self,
        detail: str | dict[str, Any] = "An error occurred",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    ) -> None:
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail)

class ServiceNotConfigured(CustomException):
    """A required backing service has no configuration."""
    def __init__(self, detail: str = "Service not configured"):
        super().__init__(detail, status.HTTP_503_SERVICE_UNAVAILABLE)

class VisionServiceError(CustomException):
    """The vision model call failed or returned nothing usable."""
    def __init__(self, detail: str = "Failed to analyze image"):
        super().__init__(detail, status.HTTP_502_BAD_GATEWAY)
