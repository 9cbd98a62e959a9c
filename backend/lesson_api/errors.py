"""Error kinds raised by the services.

Every failure a service can detect is raised as an `AppError` tagged with
one `ErrorKind`. Services never deal with HTTP; the boundary in `main`
owns the kind -> status table and the JSON envelope.
"""

from enum import Enum
from typing import Dict, Optional


class ErrorKind(str, Enum):
    VALIDATION_FAILED = "ValidationFailed"
    USERNAME_TAKEN = "UsernameTaken"
    AUTHENTICATION_FAILED = "AuthenticationFailed"
    MISSING_CREDENTIAL = "MissingCredential"
    INVALID_TOKEN = "InvalidToken"
    USER_NOT_FOUND = "UserNotFound"
    NOT_FOUND_RESOURCE = "NotFoundResource"
    INTERNAL = "Internal"


class AppError(Exception):
    """A classified failure.

    `errors` maps field names to messages for validation failures and is
    empty otherwise.
    """

    def __init__(self, kind: ErrorKind, message: str, errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.errors = dict(errors or {})

    def __repr__(self) -> str:
        return f"AppError(kind={self.kind.value!r}, message={self.message!r})"


def validation_failed(errors: Dict[str, str], message: str = "invalid input") -> AppError:
    return AppError(ErrorKind.VALIDATION_FAILED, message, errors)


def not_found(message: str = "resource not found") -> AppError:
    return AppError(ErrorKind.NOT_FOUND_RESOURCE, message)
