import pytest

from studydesk.services.errors import ErrorKind, NetworkError, PermissionDeniedError, ValidationError
from studydesk.services.retry_gateway import (
    CancelToken,
    RetryRequest,
    RetryWriteGateway,
    UnknownOperationError,
    backoff_delay_ms,
)


class FlakyHandler:
    """Fails with the queued errors, then returns its payload"""

    def __init__(self, *errors):
        self.errors = list(errors)
        self.calls = []

    def __call__(self, payload):
        self.calls.append(dict(payload))
        if self.errors:
            raise self.errors.pop(0)
        return payload.get("value")


SAVE = RetryRequest("todos.create", {"value": 1}, label="Add task")


def test_backoff_doubles_each_attempt():
    assert [backoff_delay_ms(n, 1000) for n in (1, 2, 3)] == [1000, 2000, 4000]


def test_success_on_first_attempt(gateway, sleep):
    handler = FlakyHandler()
    gateway.register("todos.create", handler)
    result = gateway.execute(SAVE)
    assert result.ok
    assert result.value == 1
    assert result.attempts == 1
    assert result.message == ""
    assert sleep.calls == []
    assert not gateway.is_saving


def test_network_failures_exhaust_three_attempts(gateway, sleep, alerts):
    handler = FlakyHandler(*[NetworkError("offline")] * 3)
    gateway.register("todos.create", handler)
    result = gateway.execute(SAVE)
    assert not result.ok
    assert result.attempts == 3
    assert len(handler.calls) == 3
    assert sleep.calls == [1.0, 2.0]
    assert result.kind == ErrorKind.NETWORK
    assert result.retriable
    assert gateway.can_retry
    assert gateway.last_failed_request == SAVE
    assert isinstance(gateway.last_error, NetworkError)

    (alert,) = alerts.drain()
    assert alert.level == "error"
    assert alert.retry_available
    assert alert.message == "Network connection failed. Please check your internet connection."


def test_recovers_after_transient_failure(gateway, sleep, alerts):
    handler = FlakyHandler(ConnectionError("reset"))
    gateway.register("todos.create", handler)
    result = gateway.execute(SAVE)
    assert result.ok
    assert result.attempts == 2
    assert sleep.calls == [1.0]
    assert alerts.drain() == []
    assert gateway.last_error is None


@pytest.mark.parametrize("error", [PermissionDeniedError(), ValidationError({"text": "required"})])
def test_non_retriable_errors_fail_immediately(gateway, sleep, alerts, error):
    handler = FlakyHandler(error)
    gateway.register("todos.create", handler)
    result = gateway.execute(SAVE)
    assert not result.ok
    assert result.attempts == 1
    assert not result.retriable
    assert sleep.calls == []
    assert not gateway.can_retry
    assert gateway.last_error is error
    assert not alerts.drain()[0].retry_available


def test_retry_last_replays_failed_request(gateway):
    handler = FlakyHandler(*[NetworkError()] * 3)
    gateway.register("todos.create", handler)
    gateway.execute(SAVE)
    result = gateway.retry_last()
    assert result.ok
    assert handler.calls[-1] == {"value": 1}
    assert not gateway.can_retry
    assert gateway.retry_last() is None


def test_unknown_operation_kind(gateway):
    with pytest.raises(UnknownOperationError):
        gateway.execute(RetryRequest("nope"))


def test_cancel_during_backoff_stops_retries(alerts):
    token = CancelToken()
    handler = FlakyHandler(*[NetworkError()] * 3)
    gateway = RetryWriteGateway(max_retries=3, base_delay_ms=1000, alerts=alerts, sleep=lambda s: token.cancel())
    gateway.register("todos.create", handler)
    result = gateway.execute(SAVE, token)
    assert result.cancelled
    assert result.message == "Save cancelled."
    assert len(handler.calls) == 1
    assert not gateway.can_retry
    assert alerts.drain() == []


def test_cancelled_token_skips_the_write(gateway):
    handler = FlakyHandler()
    gateway.register("todos.create", handler)
    token = CancelToken()
    token.cancel()
    result = gateway.execute(SAVE, token)
    assert result.cancelled
    assert result.attempts == 0
    assert handler.calls == []


def test_cancel_all_cancels_in_flight_writes(alerts):
    seen = []
    gateway = RetryWriteGateway(max_retries=3, base_delay_ms=5, alerts=alerts, sleep=lambda s: gateway.cancel_all())

    def handler(payload):
        seen.append(payload)
        raise NetworkError()

    gateway.register("todos.create", handler)
    assert gateway.execute(SAVE).cancelled
    assert len(seen) == 1


def test_is_saving_during_write(gateway):
    observed = []
    gateway.register("todos.create", lambda payload: observed.append(gateway.is_saving))
    gateway.execute(SAVE)
    assert observed == [True]
    assert not gateway.is_saving


def test_token_wait_used_without_injected_sleep():
    token = CancelToken()
    token.cancel()
    gateway = RetryWriteGateway(max_retries=2, base_delay_ms=10_000)
    assert gateway._wait(10.0, token) is True


def test_max_retries_must_be_positive():
    with pytest.raises(ValueError):
        RetryWriteGateway(max_retries=0)
