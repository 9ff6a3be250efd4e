"""Retry-write gateway: every remote create/update/delete goes through here.

A write is described by a ``RetryRequest`` value (operation kind plus
payload) and dispatched to the handler registered for that kind. Failed
attempts are retried with exponential backoff; once the retries are used
up the request is kept so the user can replay it.

Delivery is at-least-once: a write that reached the store before the
failure was reported is applied again on retry. Handlers must be
overwrite-shaped (set the completed flag to a value, never flip it).
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional

from studydesk.services.errors import (
    RETRIABLE_KINDS,
    ErrorKind,
    get_error_message,
    log_error,
)
from studydesk.services.event_bus import AlertCenter
from studydesk.utils.constants import DEFAULT_BASE_DELAY_MS, DEFAULT_MAX_RETRIES
from studydesk.utils.logging_handler import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class RetryRequest:
    operation_kind: str
    payload: Mapping[str, Any] = field(default_factory=dict)
    label: str = ""

    def describe(self) -> str:
        return self.label or self.operation_kind


@dataclass(frozen=True)
class WriteResult:
    ok: bool
    request: RetryRequest
    value: Any = None
    error: Optional[BaseException] = None
    kind: Optional[ErrorKind] = None
    retriable: bool = False
    attempts: int = 0
    cancelled: bool = False

    @property
    def message(self) -> str:
        if self.ok:
            return ""
        if self.cancelled:
            return "Save cancelled."
        return get_error_message(self.error)


class CancelToken:
    """Cancels pending backoff waits and any remaining attempts"""

    def __init__(self):
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self):
        self._event.set()

    def wait(self, seconds: float) -> bool:
        """Sleep up to seconds; True if cancelled meanwhile"""
        return self._event.wait(seconds)


class UnknownOperationError(LookupError):
    pass


def backoff_delay_ms(attempt: int, base_delay_ms: int) -> int:
    """Delay after the given failed attempt (1-based)"""
    return base_delay_ms * 2 ** (attempt - 1)


class RetryWriteGateway:
    def __init__(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_delay_ms: int = DEFAULT_BASE_DELAY_MS,
        alerts: Optional[AlertCenter] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self._alerts = alerts
        self._sleep = sleep
        self._handlers: Dict[str, Callable[[Mapping[str, Any]], Any]] = {}
        self._pending = 0
        self._lock = threading.Lock()
        self._tokens: set = set()
        self.last_error: Optional[BaseException] = None
        self.last_failed_request: Optional[RetryRequest] = None

    @property
    def is_saving(self) -> bool:
        return self._pending > 0

    @property
    def can_retry(self) -> bool:
        return self.last_failed_request is not None

    def register(self, operation_kind: str, handler: Callable[[Mapping[str, Any]], Any]):
        self._handlers[operation_kind] = handler

    def _wait(self, seconds: float, token: CancelToken) -> bool:
        """Back off for seconds; True if the token was cancelled"""
        if self._sleep is None:
            return token.wait(seconds)
        self._sleep(seconds)
        return token.cancelled

    def execute(self, request: RetryRequest, cancel_token: Optional[CancelToken] = None) -> WriteResult:
        try:
            handler = self._handlers[request.operation_kind]
        except KeyError:
            raise UnknownOperationError(request.operation_kind) from None

        token = cancel_token or CancelToken()
        with self._lock:
            self._pending += 1
            self._tokens.add(token)
        try:
            result = self._run(handler, request, token)
        finally:
            with self._lock:
                self._pending -= 1
                self._tokens.discard(token)

        if result.ok:
            self.last_error = None
            if self.last_failed_request == request:
                self.last_failed_request = None
        elif not result.cancelled:
            self.last_error = result.error
            if result.retriable:
                self.last_failed_request = request
            if self._alerts is not None:
                self._alerts.error(result.message, retry_available=result.retriable)
        return result

    def _run(self, handler, request: RetryRequest, token: CancelToken) -> WriteResult:
        attempt = 0
        while True:
            attempt += 1
            if token.cancelled:
                logger.info("%s cancelled before attempt %d", request.describe(), attempt)
                return WriteResult(ok=False, request=request, attempts=attempt - 1, cancelled=True)
            try:
                value = handler(request.payload)
            except Exception as exc:
                kind = log_error(exc, f"{request.describe()} attempt {attempt}/{self.max_retries}", logger)
                retriable = kind in RETRIABLE_KINDS
                if not retriable or attempt >= self.max_retries:
                    return WriteResult(
                        ok=False,
                        request=request,
                        error=exc,
                        kind=kind,
                        retriable=retriable,
                        attempts=attempt,
                    )
                delay_ms = backoff_delay_ms(attempt, self.base_delay_ms)
                logger.info("Retrying %s in %d ms", request.describe(), delay_ms)
                if self._wait(delay_ms / 1000, token):
                    logger.info("%s cancelled during backoff", request.describe())
                    return WriteResult(
                        ok=False, request=request, error=exc, kind=kind,
                        retriable=retriable, attempts=attempt, cancelled=True,
                    )
                continue
            if attempt > 1:
                logger.info("%s succeeded on attempt %d", request.describe(), attempt)
            return WriteResult(ok=True, request=request, value=value, attempts=attempt)

    def retry_last(self, cancel_token: Optional[CancelToken] = None) -> Optional[WriteResult]:
        """Replay the last request that exhausted its retries"""
        request = self.last_failed_request
        if request is None:
            return None
        logger.info("Manual retry of %s", request.describe())
        return self.execute(request, cancel_token)

    def cancel_all(self):
        """Cancel every in-flight write (used on teardown)"""
        with self._lock:
            tokens = list(self._tokens)
        for token in tokens:
            token.cancel()
