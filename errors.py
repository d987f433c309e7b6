"""Domain error taxonomy shared by the services and the HTTP layer."""

from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    CONFLICT = "CONFLICT"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"


class DomainError(Exception):
    """Base domain error with code, user-safe message and HTTP status."""

    status_code = 500

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Raised when a request is missing fields or carries malformed ones."""

    status_code = 400

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(code=ErrorCode.VALIDATION_ERROR, message=message)
        self.field = field


class NotFoundError(DomainError):
    status_code = 404


class UserNotFoundError(NotFoundError):
    """Raised when no ledger owner matches the given email."""

    def __init__(self, email: str) -> None:
        super().__init__(code=ErrorCode.USER_NOT_FOUND, message="User not found")
        self.email = email


class ConflictError(DomainError):
    """Raised when a write lost a race against a concurrent writer."""

    status_code = 409

    def __init__(self, message: str = "conflicting concurrent update, please retry") -> None:
        super().__init__(code=ErrorCode.CONFLICT, message=message)


class PersistenceError(DomainError):
    """Raised when the storage layer fails; the detail is logged, never returned."""

    status_code = 500

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(code=ErrorCode.PERSISTENCE_ERROR, message=message)
