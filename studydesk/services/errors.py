"""Error taxonomy, classification and logging helpers"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional

from sqlalchemy import exc as sa_exc

from studydesk.utils.logging_handler import setup_logger

logger = setup_logger(__name__)


class ErrorKind(str, Enum):
    AUTH = "auth"
    STORE = "store"
    VALIDATION = "validation"
    NETWORK = "network"
    PERMISSION = "permission"
    UNKNOWN = "unknown"


# User-friendly error messages
ERROR_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.AUTH: "Authentication failed. Please try again.",
    ErrorKind.STORE: "Failed to save data. Please check your connection and try again.",
    ErrorKind.VALIDATION: "Please check your input and try again.",
    ErrorKind.NETWORK: "Network connection failed. Please check your internet connection.",
    ErrorKind.PERMISSION: "You don't have permission to perform this action.",
    ErrorKind.UNKNOWN: "Something went wrong. Please try again.",
}

RETRIABLE_KINDS = frozenset({ErrorKind.NETWORK, ErrorKind.STORE, ErrorKind.UNKNOWN})

# Backend error codes, checked before anything else
BACKEND_ERROR_MAP: Dict[str, ErrorKind] = {
    "auth/user-not-found": ErrorKind.AUTH,
    "auth/wrong-password": ErrorKind.AUTH,
    "auth/email-already-in-use": ErrorKind.AUTH,
    "auth/weak-password": ErrorKind.AUTH,
    "auth/invalid-email": ErrorKind.AUTH,
    "auth/user-disabled": ErrorKind.AUTH,
    "auth/too-many-requests": ErrorKind.AUTH,
    "auth/network-request-failed": ErrorKind.NETWORK,
    "store/permission-denied": ErrorKind.PERMISSION,
    "store/not-found": ErrorKind.STORE,
    "store/already-exists": ErrorKind.STORE,
    "store/resource-exhausted": ErrorKind.STORE,
    "store/failed-precondition": ErrorKind.VALIDATION,
    "store/aborted": ErrorKind.NETWORK,
    "store/out-of-range": ErrorKind.VALIDATION,
    "store/unimplemented": ErrorKind.UNKNOWN,
    "store/internal": ErrorKind.UNKNOWN,
    "store/unavailable": ErrorKind.NETWORK,
    "store/data-loss": ErrorKind.UNKNOWN,
    "store/unauthenticated": ErrorKind.AUTH,
}

# Checked in order; subclasses before their bases
_TYPE_MAP = (
    (sa_exc.DisconnectionError, ErrorKind.NETWORK),
    (sa_exc.TimeoutError, ErrorKind.NETWORK),
    (sa_exc.OperationalError, ErrorKind.NETWORK),
    (sa_exc.IntegrityError, ErrorKind.STORE),
    (sa_exc.DataError, ErrorKind.VALIDATION),
    (sa_exc.SQLAlchemyError, ErrorKind.STORE),
    (ConnectionError, ErrorKind.NETWORK),
    (TimeoutError, ErrorKind.NETWORK),
    (PermissionError, ErrorKind.PERMISSION),
)

_NETWORK_HINTS = ("fetch", "network", "connection", "timed out", "timeout")


class AppError(Exception):
    """Base class for errors raised by StudyDesk itself"""

    kind = ErrorKind.UNKNOWN

    def __init__(self, message: str = "", code: Optional[str] = None):
        super().__init__(message or ERROR_MESSAGES[self.kind])
        self.code = code


class AuthError(AppError):
    kind = ErrorKind.AUTH


class StoreError(AppError):
    kind = ErrorKind.STORE


class NetworkError(AppError):
    kind = ErrorKind.NETWORK


class PermissionDeniedError(AppError):
    kind = ErrorKind.PERMISSION


class UnknownError(AppError):
    kind = ErrorKind.UNKNOWN


class ValidationError(AppError):
    """Caller-side input rejected before any remote call.

    field_errors maps a form field name to its message.
    """

    kind = ErrorKind.VALIDATION

    def __init__(self, field_errors: Dict[str, str], message: str = ""):
        self.field_errors = dict(field_errors)
        if not message:
            message = "; ".join(f"{field}: {msg}" for field, msg in self.field_errors.items())
        super().__init__(message)


def classify_error(error: Optional[BaseException]) -> ErrorKind:
    """Determine the error kind: backend code, then exception type, then message heuristics"""
    if error is None:
        return ErrorKind.UNKNOWN

    if isinstance(error, AppError) and error.code not in BACKEND_ERROR_MAP:
        return error.kind

    code = getattr(error, "code", None)
    if isinstance(code, str) and code in BACKEND_ERROR_MAP:
        return BACKEND_ERROR_MAP[code]

    for exc_type, kind in _TYPE_MAP:
        if isinstance(error, exc_type):
            return kind

    message = str(error).lower()
    if any(hint in message for hint in _NETWORK_HINTS):
        return ErrorKind.NETWORK

    if "Auth" in type(error).__name__ or "auth" in message:
        return ErrorKind.AUTH

    return ErrorKind.UNKNOWN


def get_error_message(error: Optional[BaseException]) -> str:
    """User-facing message for an error"""
    return ERROR_MESSAGES[classify_error(error)]


def is_retriable_error(error: Optional[BaseException]) -> bool:
    return classify_error(error) in RETRIABLE_KINDS


def log_error(error: BaseException, context: str = "", log: Optional[logging.Logger] = None) -> ErrorKind:
    """Log an error with its context label, classified kind and stack trace"""
    log = log or logger
    kind = classify_error(error)
    timestamp = datetime.now(timezone.utc).isoformat()
    label = f"[{context}] " if context else ""
    log.error(
        "%sError at %s: kind=%s message=%s",
        label,
        timestamp,
        kind.value,
        error,
        exc_info=(type(error), error, error.__traceback__),
    )
    return kind
