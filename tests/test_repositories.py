import pytest

from studydesk.services.errors import NetworkError, ValidationError
from studydesk.services.focus_timer import FocusSession
from studydesk.services.repositories import FocusHistoryRepository, TimetableRepository, TodoRepository


class FlakyStore:
    """Wraps a store; the next `failures` writes raise NetworkError"""

    def __init__(self, store, failures=0):
        self._store = store
        self.failures = failures
        self.writes = 0

    def _maybe_fail(self):
        self.writes += 1
        if self.failures:
            self.failures -= 1
            raise NetworkError("offline")

    def add(self, collection, data):
        self._maybe_fail()
        return self._store.add(collection, data)

    def set(self, collection, doc_id, data):
        self._maybe_fail()
        return self._store.set(collection, doc_id, data)

    def update(self, collection, doc_id, fields):
        self._maybe_fail()
        return self._store.update(collection, doc_id, fields)

    def delete(self, collection, doc_id):
        self._maybe_fail()
        return self._store.delete(collection, doc_id)

    def __getattr__(self, name):
        return getattr(self._store, name)


class TestTimetableRepository:
    @pytest.fixture
    def repo(self, store, gateway, user_id):
        return TimetableRepository(store, gateway, user_id)

    def test_add_persists_and_caches(self, repo, store, user_id):
        result = repo.add("Math", ["Wednesday", "Monday"], "09:00", "10:00", location="Room 1")
        assert result.ok
        event = result.value
        assert repo.entries == [event]
        stored = store.get("entries", event.id)
        assert stored["days"] == ["Monday", "Wednesday"]
        assert stored["userId"] == user_id

    def test_load_sorts_by_start_time(self, repo, gateway, store, user_id):
        repo.add("Late", ["Monday"], "14:00", "15:00")
        repo.add("Early", ["Monday"], "08:00", "09:00")
        fresh = TimetableRepository(store, gateway, user_id)
        assert [e.subject for e in fresh.load()] == ["Early", "Late"]

    def test_update_replaces_entry(self, repo):
        event = repo.add("Math", ["Monday"], "09:00", "10:00").value
        result = repo.update(event.id, "Algebra", ["Friday"], "07:00", "08:00")
        assert result.ok
        assert repo.get(event.id).subject == "Algebra"
        assert repo.get(event.id).days == frozenset({"Friday"})

    def test_delete_removes_entry(self, repo, store):
        event = repo.add("Math", ["Monday"], "09:00", "10:00").value
        assert repo.delete(event.id).ok
        assert repo.entries == []
        assert store.get("entries", event.id) is None

    def test_invalid_entry_never_reaches_the_store(self, repo, store, user_id):
        with pytest.raises(ValidationError):
            repo.add("Math", [], "09:00", "10:00")
        assert store.query("entries", userId=user_id) == []

    def test_delete_of_missing_entry_fails_after_retries(self, repo, sleep):
        result = repo.delete("missing")
        assert not result.ok
        assert result.attempts == 3
        assert sleep.calls == [1.0, 2.0]

    def test_transient_failure_is_retried(self, store, gateway, user_id, sleep):
        flaky = FlakyStore(store, failures=1)
        repo = TimetableRepository(flaky, gateway, user_id)
        result = repo.add("Math", ["Monday"], "09:00", "10:00")
        assert result.ok
        assert result.attempts == 2
        assert len(repo.entries) == 1
        assert len(store.query("entries", userId=user_id)) == 1


class TestTodoRepository:
    @pytest.fixture
    def clock(self):
        ticks = iter(range(1000, 2000))
        return lambda: next(ticks)

    @pytest.fixture
    def repo(self, store, gateway, user_id, clock):
        return TodoRepository(store, gateway, user_id, clock_ms=clock)

    def test_add_puts_newest_first(self, repo):
        repo.add("first")
        repo.add("  second  ")
        assert [t.text for t in repo.todos] == ["second", "first"]
        assert repo.todos[0].created_at > repo.todos[1].created_at

    def test_blank_text_rejected(self, repo):
        with pytest.raises(ValidationError) as exc_info:
            repo.add("   ")
        assert "text" in exc_info.value.field_errors

    def test_toggle_sends_target_value(self, repo, store):
        item = repo.add("read").value
        repo.toggle(item.id)
        assert repo.todos[0].completed
        assert store.get("todos", item.id)["completed"] is True
        repo.toggle(item.id)
        assert not repo.todos[0].completed

    def test_toggle_unknown_id(self, repo):
        with pytest.raises(ValidationError):
            repo.toggle("missing")

    def test_replayed_completion_is_idempotent(self, store, gateway, user_id, clock):
        flaky = FlakyStore(store)
        repo = TodoRepository(flaky, gateway, user_id, clock_ms=clock)
        item = repo.add("read").value
        flaky.failures = 3
        assert not repo.set_completed(item.id, True).ok
        assert gateway.can_retry
        assert gateway.retry_last().ok
        assert gateway.retry_last() is None
        assert store.get("todos", item.id)["completed"] is True
        assert repo.todos[0].completed

    def test_delete(self, repo, store, user_id):
        item = repo.add("read").value
        repo.delete(item.id)
        assert repo.todos == []
        assert store.query("todos", userId=user_id) == []

    def test_load_orders_newest_first(self, repo, store, gateway, user_id, clock):
        repo.add("old")
        repo.add("new")
        fresh = TodoRepository(store, gateway, user_id, clock_ms=clock)
        assert [t.text for t in fresh.load()] == ["new", "old"]


class TestFocusHistoryRepository:
    def test_record_stamps_user_and_caches(self, store, gateway, user_id):
        repo = FocusHistoryRepository(store, gateway, user_id)
        result = repo.record(FocusSession(start_time=1_000, duration=25))
        assert result.ok
        assert repo.sessions[0].user_id == user_id
        assert repo.sessions[0].id is not None

    def test_load_orders_newest_first(self, store, gateway, user_id):
        repo = FocusHistoryRepository(store, gateway, user_id)
        repo.record(FocusSession(start_time=1_000, duration=25))
        repo.record(FocusSession(start_time=5_000, duration=45))
        fresh = FocusHistoryRepository(store, gateway, user_id)
        assert [s.duration for s in fresh.load()] == [45, 25]
