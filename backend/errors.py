"""
Typed application errors for route handlers.

Every failure a handler can raise belongs to a closed set of kinds, each
carrying its HTTP status code, a category label and a default message. The
boundary in ``backend.error_handlers`` turns them into JSON responses.
"""

import functools
import random
import re
import string
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(Enum):
    NOT_FOUND = (404, "Not Found", "Resource not found")
    AUTHENTICATION = (401, "Authentication Error", "Authentication required")
    PERMISSION = (403, "Permission Error", "Access denied")
    VALIDATION = (400, "Validation Error", "Invalid request")
    DATABASE = (500, "Database Error", "Database operation failed")
    NETWORK = (500, "Network Error", "Network request failed")
    APPLICATION = (500, "Application Error", "An unexpected error occurred")

    def __init__(self, status_code: int, label: str, default_message: str):
        self.status_code = status_code
        self.label = label
        self.default_message = default_message


class AppError(Exception):
    """An error that knows its HTTP status code and category."""

    def __init__(self, message: str, status_code: int = 500, type: str = "Application Error"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.type = type

    @classmethod
    def from_kind(cls, kind: ErrorKind, message: Optional[str] = None) -> "AppError":
        return cls(message or kind.default_message, kind.status_code, kind.label)

    def to_dict(self) -> dict:
        return {"error": self.type, "message": self.message, "status_code": self.status_code}

    def __repr__(self) -> str:
        return f"AppError({self.message!r}, status_code={self.status_code}, type={self.type!r})"


class ErrorFactory:
    """Shortcuts for the common error kinds."""

    @staticmethod
    def not_found(resource: str = "Resource") -> AppError:
        return AppError.from_kind(ErrorKind.NOT_FOUND, f"{resource} not found")

    @staticmethod
    def unauthorized(message: Optional[str] = None) -> AppError:
        return AppError.from_kind(ErrorKind.AUTHENTICATION, message)

    @staticmethod
    def forbidden(message: Optional[str] = None) -> AppError:
        return AppError.from_kind(ErrorKind.PERMISSION, message)

    @staticmethod
    def validation(message: Optional[str] = None) -> AppError:
        return AppError.from_kind(ErrorKind.VALIDATION, message)

    @staticmethod
    def database(message: Optional[str] = None) -> AppError:
        return AppError.from_kind(ErrorKind.DATABASE, message)

    @staticmethod
    def network(message: Optional[str] = None) -> AppError:
        return AppError.from_kind(ErrorKind.NETWORK, message)


errors = ErrorFactory()


def async_handler(handler: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Give a route handler a uniform async signature.

    The wrapped handler's result and exceptions pass through untouched.
    """

    @functools.wraps(handler)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        return await handler(*args, **kwargs)

    return wrapper


# Patterns scrubbed from messages before they reach a client
_REDACTIONS = (
    (re.compile(r"https?://[^:\s]+:[^@\s]+@\S+"), "[REDACTED_URL]"),
    (re.compile(r"eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+"), "[REDACTED_TOKEN]"),
    (re.compile(r"[a-zA-Z0-9]{32,}"), "[REDACTED_KEY]"),
    (re.compile(r"libsql://\S+"), "[DATABASE_URL]"),
    (re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"), "[EMAIL]"),
)

# (needles, category, hint), first match wins
_CATEGORIES = (
    (("Failed query", "Database"), ErrorKind.DATABASE.label,
     "There was a problem accessing the database. This is usually temporary."),
    (("Network", "fetch"), ErrorKind.NETWORK.label,
     "Unable to connect to required services. Please check your connection."),
    (("Authentication", "Unauthorized"), ErrorKind.AUTHENTICATION.label,
     "Your session may have expired. Please try signing in again."),
    (("Permission", "Forbidden"), ErrorKind.PERMISSION.label,
     "You do not have permission to access this resource."),
    (("Not Found", "404"), ErrorKind.NOT_FOUND.label,
     "The requested resource could not be found."),
    (("Validation", "Invalid"), ErrorKind.VALIDATION.label,
     "The provided data is invalid. Please check your input."),
    (("Rate limit",), "Rate Limit Error",
     "Too many requests. Please wait a moment before trying again."),
)

MAX_MESSAGE_LENGTH = 200


def sanitize_error_message(error: Any) -> dict:
    """Strip secrets from an exception message and categorize it for display."""
    if not isinstance(error, Exception):
        return {"message": "An unexpected error occurred", "type": "Unknown Error"}

    message = str(error) or "An unexpected error occurred"
    for pattern, replacement in _REDACTIONS:
        message = pattern.sub(replacement, message)

    result = {"message": message[:MAX_MESSAGE_LENGTH], "type": type(error).__name__}
    for needles, category, hint in _CATEGORIES:
        if any(needle in message for needle in needles):
            result["type"] = category
            result["details"] = hint
            break
    return result


def generate_error_id() -> str:
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=7))
    return f"ERR-{int(time.time() * 1000)}-{suffix}"


def get_error_status_code(error: Any) -> int:
    if isinstance(error, AppError):
        return error.status_code
    if isinstance(error, Exception):
        message = str(error).lower()
        if "not found" in message or "404" in message:
            return 404
        if "unauthorized" in message or "authentication" in message:
            return 401
        if "forbidden" in message or "permission" in message:
            return 403
        if "validation" in message or "invalid" in message:
            return 400
        if "rate limit" in message:
            return 429
        if "timeout" in message:
            return 408
    return 500
