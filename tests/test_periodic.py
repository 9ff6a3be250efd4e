import pytest

from conftest import FakeClock
from studydesk.services.periodic import PeriodicScheduler, PeriodicTask


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    return PeriodicScheduler(clock=clock)


def test_task_waits_one_interval_by_default(scheduler, clock):
    calls = []
    scheduler.every(5, lambda: calls.append(1))
    assert scheduler.run_pending() == 0
    clock.advance(5)
    assert scheduler.run_pending() == 1
    assert calls == [1]


def test_run_immediately(scheduler):
    calls = []
    scheduler.every(30, lambda: calls.append(1), run_immediately=True)
    assert scheduler.run_pending() == 1


def test_catch_up_task_runs_every_missed_interval(scheduler, clock):
    task = scheduler.every(1, lambda: None, catch_up=True)
    clock.advance(4.5)
    assert scheduler.run_pending() == 4
    assert task.runs == 4
    clock.advance(0.5)
    assert scheduler.run_pending() == 1


def test_plain_task_coalesces_missed_runs(scheduler, clock):
    task = scheduler.every(1, lambda: None)
    clock.advance(10)
    assert scheduler.run_pending() == 1
    assert task.next_run == clock() + 1


def test_cancelled_task_never_runs_again(scheduler, clock):
    calls = []
    task = scheduler.every(1, lambda: calls.append(1))
    task.cancel()
    clock.advance(3)
    assert scheduler.run_pending() == 0
    assert scheduler.tasks == []
    assert "cancelled" in repr(task)


def test_task_may_cancel_itself(scheduler, clock):
    holder = {}

    def once():
        holder["task"].cancel()

    holder["task"] = scheduler.every(1, once, catch_up=True)
    clock.advance(10)
    assert scheduler.run_pending() == 1


def test_seconds_until_next(scheduler, clock):
    assert scheduler.seconds_until_next() is None
    scheduler.every(30, lambda: None)
    scheduler.every(5, lambda: None)
    clock.advance(2)
    assert scheduler.seconds_until_next() == pytest.approx(3)


def test_shutdown_cancels_everything(scheduler):
    task = scheduler.every(1, lambda: None, name="tick")
    scheduler.shutdown()
    assert task.cancelled
    with pytest.raises(RuntimeError):
        scheduler.every(1, lambda: None)


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        PeriodicTask("bad", 0, lambda: None, 0.0, False)


def test_callback_errors_propagate(scheduler, clock):
    def broken():
        raise RuntimeError("boom")

    scheduler.every(1, broken)
    clock.advance(1)
    with pytest.raises(RuntimeError):
        scheduler.run_pending()
