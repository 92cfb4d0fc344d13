"""
Application errors and error classification.

Services raise AppError subclasses. Controllers turn them into
(success, error_message) tuples for the UI, and API controllers map them
to HTTP status codes via `status_code`.

classify_error() also handles exceptions that did not come from our own
code (httpx, SQLAlchemy, anthropic) so every failure can be shown with a
friendly message and a suggested action.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

import httpx
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

logger = logging.getLogger(__name__)


class ErrorType(str, Enum):
    NETWORK = "NETWORK"
    AUTHENTICATION = "AUTHENTICATION"
    AUTHORIZATION = "AUTHORIZATION"
    VALIDATION = "VALIDATION"
    DATABASE = "DATABASE"
    STORAGE = "STORAGE"
    RATE_LIMIT = "RATE_LIMIT"
    SERVER = "SERVER"
    CLIENT = "CLIENT"
    NOT_FOUND = "NOT_FOUND"
    UNKNOWN = "UNKNOWN"


class ErrorSeverity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


STATUS_CODES = {
    ErrorType.AUTHENTICATION: 401,
    ErrorType.AUTHORIZATION: 403,
    ErrorType.VALIDATION: 400,
    ErrorType.NOT_FOUND: 404,
    ErrorType.RATE_LIMIT: 429,
    ErrorType.NETWORK: 503,
    ErrorType.SERVER: 502,
    ErrorType.DATABASE: 500,
    ErrorType.STORAGE: 500,
    ErrorType.CLIENT: 400,
    ErrorType.UNKNOWN: 500,
}

USER_MESSAGES = {
    ErrorType.NETWORK: "Unable to connect. Please check your internet connection and try again.",
    ErrorType.AUTHENTICATION: "Your session has expired. Please sign in again.",
    ErrorType.AUTHORIZATION: "You don't have permission to perform this action.",
    ErrorType.VALIDATION: "Please check your input and try again.",
    ErrorType.DATABASE: "A data error occurred. Please try again later.",
    ErrorType.STORAGE: "Failed to save the file. Please try again.",
    ErrorType.RATE_LIMIT: "Too many requests. Please wait a moment before trying again.",
    ErrorType.SERVER: "The service is temporarily unavailable. Please try again later.",
    ErrorType.CLIENT: "Something went wrong with the request. Please try again.",
    ErrorType.NOT_FOUND: "We couldn't find what you were looking for.",
    ErrorType.UNKNOWN: "An unexpected error occurred. Please try again.",
}

ERROR_ACTIONS = {
    ErrorType.NETWORK: ["Check your internet connection", "Retry"],
    ErrorType.AUTHENTICATION: ["Sign in again"],
    ErrorType.AUTHORIZATION: ["Contact support"],
    ErrorType.VALIDATION: ["Review your input"],
    ErrorType.DATABASE: ["Retry", "Contact support"],
    ErrorType.STORAGE: ["Retry", "Try a smaller file"],
    ErrorType.RATE_LIMIT: ["Wait a moment", "Retry"],
    ErrorType.SERVER: ["Retry later"],
    ErrorType.CLIENT: ["Retry"],
    ErrorType.NOT_FOUND: ["Go back"],
    ErrorType.UNKNOWN: ["Retry", "Contact support"],
}

RETRYABLE_TYPES = {ErrorType.NETWORK, ErrorType.RATE_LIMIT, ErrorType.SERVER}


class AppError(Exception):
    """Base class for errors raised by services."""

    error_type = ErrorType.UNKNOWN
    severity = ErrorSeverity.MEDIUM

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.error_type]

    @property
    def retryable(self) -> bool:
        return self.error_type in RETRYABLE_TYPES


class ValidationError(AppError):
    error_type = ErrorType.VALIDATION
    severity = ErrorSeverity.LOW


class AuthenticationError(AppError):
    error_type = ErrorType.AUTHENTICATION
    severity = ErrorSeverity.MEDIUM


class AuthorizationError(AppError):
    error_type = ErrorType.AUTHORIZATION
    severity = ErrorSeverity.MEDIUM


class NotFoundError(AppError):
    error_type = ErrorType.NOT_FOUND
    severity = ErrorSeverity.LOW


class RateLimitError(AppError):
    error_type = ErrorType.RATE_LIMIT
    severity = ErrorSeverity.LOW


class DatabaseError(AppError):
    error_type = ErrorType.DATABASE
    severity = ErrorSeverity.HIGH


class StorageError(AppError):
    error_type = ErrorType.STORAGE
    severity = ErrorSeverity.MEDIUM


class ExternalServiceError(AppError):
    """An upstream service (LLM, TTS server, realtime server) failed."""
    error_type = ErrorType.SERVER
    severity = ErrorSeverity.MEDIUM


@dataclass
class ErrorInfo:
    """Classified error, ready to show to a user."""
    type: ErrorType
    severity: ErrorSeverity
    message: str
    user_message: str
    actions: list[str] = field(default_factory=list)
    retryable: bool = False
    code: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)


def _type_from_status(status: int) -> ErrorType:
    if status == 401:
        return ErrorType.AUTHENTICATION
    if status == 403:
        return ErrorType.AUTHORIZATION
    if status == 404:
        return ErrorType.NOT_FOUND
    if status == 429:
        return ErrorType.RATE_LIMIT
    if status == 400 or status == 422:
        return ErrorType.VALIDATION
    if status >= 500:
        return ErrorType.SERVER
    if status >= 400:
        return ErrorType.CLIENT
    return ErrorType.UNKNOWN


def _type_from_message(message: str) -> ErrorType:
    text = message.lower()
    if any(word in text for word in ("network", "connection", "timeout", "timed out", "fetch")):
        return ErrorType.NETWORK
    if any(word in text for word in ("invalid login", "unauthorized", "jwt", "token", "not authenticated")):
        return ErrorType.AUTHENTICATION
    if any(word in text for word in ("permission", "forbidden", "not allowed")):
        return ErrorType.AUTHORIZATION
    if any(word in text for word in ("too many", "rate limit")):
        return ErrorType.RATE_LIMIT
    if any(word in text for word in ("invalid", "required", "must be")):
        return ErrorType.VALIDATION
    if any(word in text for word in ("storage", "upload", "file")):
        return ErrorType.STORAGE
    return ErrorType.UNKNOWN


def _severity_for(error_type: ErrorType) -> ErrorSeverity:
    if error_type in (ErrorType.DATABASE,):
        return ErrorSeverity.HIGH
    if error_type in (ErrorType.VALIDATION, ErrorType.RATE_LIMIT, ErrorType.NOT_FOUND):
        return ErrorSeverity.LOW
    return ErrorSeverity.MEDIUM


def classify_error(error: BaseException) -> ErrorInfo:
    """
    Classify any exception into an ErrorInfo.

    AppErrors keep their own type and message; known library exceptions
    are mapped by class and status code; anything else falls back to
    keyword matching on the message.
    """
    message = str(error) or error.__class__.__name__
    code = None

    if isinstance(error, AppError):
        error_type = error.error_type
        severity = error.severity
        code = error.code
        # Our own messages are already user-facing
        user_message = error.message
    else:
        if isinstance(error, httpx.HTTPStatusError):
            code = str(error.response.status_code)
            error_type = _type_from_status(error.response.status_code)
        elif isinstance(error, (httpx.TimeoutException, httpx.NetworkError, ConnectionError, TimeoutError)):
            error_type = ErrorType.NETWORK
        elif isinstance(error, IntegrityError):
            # Unique/check constraint violations come from bad input
            error_type = ErrorType.VALIDATION
        elif isinstance(error, OperationalError):
            error_type = ErrorType.DATABASE
        elif isinstance(error, SQLAlchemyError):
            error_type = ErrorType.DATABASE
        elif isinstance(error, (OSError, PermissionError)):
            error_type = ErrorType.STORAGE
        else:
            error_type = _type_from_message(message)
        severity = _severity_for(error_type)
        user_message = USER_MESSAGES[error_type]

    return ErrorInfo(
        type=error_type,
        severity=severity,
        message=message,
        user_message=user_message,
        actions=list(ERROR_ACTIONS[error_type]),
        retryable=error_type in RETRYABLE_TYPES,
        code=code,
    )


def log_error(error: BaseException, context: str = "") -> ErrorInfo:
    """Classify an error and log it at a level matching its severity."""
    info = classify_error(error)
    prefix = f"{context}: " if context else ""
    if info.severity in (ErrorSeverity.HIGH, ErrorSeverity.CRITICAL):
        logger.error(f"{prefix}[{info.type.value}] {info.message}")
    else:
        logger.warning(f"{prefix}[{info.type.value}] {info.message}")
    return info
