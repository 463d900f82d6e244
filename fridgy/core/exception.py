from fastapi import HTTPException
from typing import Any, Optional
from fridgy.schemas.result import ErrorCategory


class CustomException(HTTPException):
    """
    Base class for Fridgy application errors.

    Carries the HTTP status and the ``ErrorCategory`` reported in the
    ``Result`` envelope. ``str(ex)`` is the user-facing message.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        category: ErrorCategory,
        headers: Optional[dict] = None
    ):
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.category = category

    def __str__(self) -> str:
        return str(self.detail)


class ResourceNotFoundException(CustomException):
    """A household, fridge, item, product or other document does not exist."""

    def __init__(self, resource_name: str, resource_id: Optional[Any] = None):
        if resource_id:
            message = f"{resource_name} '{resource_id}' not found"
        else:
            message = f"{resource_name} not found"

        super().__init__(
            message=message,
            status_code=404,
            category=ErrorCategory.NOT_FOUND
        )


class AuthenticationException(CustomException):
    """Missing, expired or forged Firebase ID token."""

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(
            message=message,
            status_code=401,
            category=ErrorCategory.AUTHENTICATION,
            headers={"WWW-Authenticate": "Bearer"}
        )


class AuthorizationException(CustomException):
    """The caller's household role (or admin status) does not allow the action."""

    def __init__(
        self,
        message: Optional[str] = None,
        permission: Optional[str] = None,
        status_code: int = 403
    ):
        if message:
            error_message = message
        elif permission:
            error_message = f"Your household role does not allow you to {permission}"
        else:
            error_message = "You don't have permission to do that"

        super().__init__(
            message=error_message,
            status_code=status_code,
            category=ErrorCategory.AUTHORIZATION
        )


class NotHouseholdMemberException(AuthorizationException):
    def __init__(self, household_id: Optional[str] = None):
        super().__init__("You are not a member of this household")
        self.household_id = household_id


class DuplicateResourceException(CustomException):
    """A username or category name that is already taken, or a second registration."""

    def __init__(
        self,
        resource_name: str,
        identifier: Optional[str] = None,
        status_code: int = 409
    ):
        if identifier:
            message = f"{resource_name} '{identifier}' already exists"
        else:
            message = f"{resource_name} already exists"

        super().__init__(
            message=message,
            status_code=status_code,
            category=ErrorCategory.RESOURCE_CONFLICT
        )


class ValidationException(CustomException):
    """Input that passed schema validation but is still unusable, e.g. form fields."""

    def __init__(self, message: str, field: Optional[str] = None):
        if field:
            error_message = f"Invalid {field}: {message}"
        else:
            error_message = message

        super().__init__(
            message=error_message,
            status_code=422,
            category=ErrorCategory.VALIDATION
        )


class BadRequestException(CustomException):
    """A request that conflicts with the current household or list state."""

    def __init__(self, message: str = "The request could not be processed"):
        super().__init__(
            message=message,
            status_code=400,
            category=ErrorCategory.BAD_REQUEST
        )


class InviteCodeException(BadRequestException):
    """An invite code that cannot be redeemed; ``reason`` says why."""

    MESSAGES = {
        "invalid": "Invalid invite code",
        "revoked": "This invite code has been revoked",
        "used": "This invite code has already been used",
        "expired": "This invite code has expired",
    }

    def __init__(self, reason: str = "invalid"):
        super().__init__(self.MESSAGES.get(reason, self.MESSAGES["invalid"]))
        self.reason = reason


class InternalServerException(CustomException):
    def __init__(self, message: str = "Something went wrong. Please try again."):
        super().__init__(
            message=message,
            status_code=500,
            category=ErrorCategory.INTERNAL
        )
