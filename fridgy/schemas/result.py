from enum import Enum
from pydantic import BaseModel, ConfigDict
from typing import Dict, Generic, TypeVar, Optional

T = TypeVar("T")


class ErrorCategory(Enum):
    VALIDATION = "Validation"
    NOT_FOUND = "Not Found"
    AUTHENTICATION = "Authentication"
    AUTHORIZATION = "Authorization"
    INTERNAL = "Internal Server Error"
    BAD_REQUEST = "Bad Request"
    RESOURCE_CONFLICT = "Resource Conflict"
    WEBSOCKET = "WebSocket Error"
    CUSTOM = "Custom Error"

    @classmethod
    def from_status_code(cls, status_code: int) -> "ErrorCategory":
        """Category for an HTTP error Fridgy did not raise itself (unknown route, bad method)."""
        if status_code in STATUS_CATEGORIES:
            return STATUS_CATEGORIES[status_code]
        if 400 <= status_code < 500:
            return cls.BAD_REQUEST
        if status_code >= 500:
            return cls.INTERNAL
        return cls.CUSTOM


STATUS_CATEGORIES: Dict[int, ErrorCategory] = {
    400: ErrorCategory.BAD_REQUEST,
    401: ErrorCategory.AUTHENTICATION,
    403: ErrorCategory.AUTHORIZATION,
    404: ErrorCategory.NOT_FOUND,
    405: ErrorCategory.BAD_REQUEST,
    409: ErrorCategory.RESOURCE_CONFLICT,
    422: ErrorCategory.VALIDATION,
}


class Error(BaseModel):
    message: str
    status_code: int
    category: ErrorCategory

    model_config = ConfigDict(use_enum_values=True)

    @classmethod
    def internal(cls, message: str, status_code: int = 500):
        return cls(message=message, status_code=status_code, category=ErrorCategory.INTERNAL)


class Result(BaseModel, Generic[T]):
    """
    Envelope for every HTTP response: ``success`` plus either ``data`` or ``error``.
    """

    success: bool
    error: Optional[Error] = None
    data: Optional[T] = None

    @classmethod
    def successful(cls, data: Optional[T] = None):
        return cls(success=True, data=data)

    @classmethod
    def acknowledged(cls, message: str):
        """Success for deletes and other actions with nothing to return but a message."""
        return cls(success=True, data={"message": message})

    @classmethod
    def failure(cls, error: Error):
        return cls(success=False, error=error)
