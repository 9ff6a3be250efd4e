"""In-memory views of the user's entries, todos and focus history.

Reads go straight to the store. Writes are sent through the retry gateway
as ``RetryRequest`` values; the registered handlers perform the store call
and only then mirror it into the cached list, so a manual replay keeps the
cache in step too.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional

from studydesk.database.store import DocumentStore
from studydesk.services.errors import ValidationError
from studydesk.services.focus_timer import FocusSession
from studydesk.services.retry_gateway import RetryRequest, RetryWriteGateway, WriteResult
from studydesk.services.schedule_status import RecurringEvent, validate_event
from studydesk.utils.constants import (
    DEFAULT_ENTRY_COLOR,
    ENTRIES_COLLECTION,
    FOCUS_HISTORY_COLLECTION,
    TODOS_COLLECTION,
)
from studydesk.utils.helpers import to_epoch_ms, now_local
from studydesk.utils.logging_handler import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class TodoItem:
    id: Optional[str]
    text: str
    completed: bool
    created_at: int  # epoch ms
    user_id: Optional[int] = None

    def to_document(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "completed": self.completed,
            "createdAt": self.created_at,
            "userId": self.user_id,
        }

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "TodoItem":
        return cls(
            id=document.get("id"),
            text=document["text"],
            completed=bool(document.get("completed")),
            created_at=int(document["createdAt"]),
            user_id=document.get("userId"),
        )


class TimetableRepository:
    CREATE = "entries.create"
    UPDATE = "entries.update"
    DELETE = "entries.delete"

    def __init__(self, store: DocumentStore, gateway: RetryWriteGateway, user_id: int):
        self._store = store
        self._gateway = gateway
        self.user_id = user_id
        self.entries: List[RecurringEvent] = []
        gateway.register(self.CREATE, self._apply_create)
        gateway.register(self.UPDATE, self._apply_update)
        gateway.register(self.DELETE, self._apply_delete)

    def load(self) -> List[RecurringEvent]:
        documents = self._store.query(ENTRIES_COLLECTION, userId=self.user_id)
        self.entries = sorted(
            (RecurringEvent.from_document(d) for d in documents),
            key=lambda e: e.start_time,
        )
        logger.debug("Loaded %d entries for user %s", len(self.entries), self.user_id)
        return self.entries

    def get(self, event_id: str) -> Optional[RecurringEvent]:
        return next((e for e in self.entries if e.id == event_id), None)

    def add(
        self,
        subject: str,
        days: Iterable[str],
        start_time: str,
        end_time: str,
        location: Optional[str] = None,
        color: Optional[str] = DEFAULT_ENTRY_COLOR,
    ) -> WriteResult:
        event = validate_event(subject, days, start_time, end_time, location, color, user_id=self.user_id)
        request = RetryRequest(self.CREATE, {"document": event.to_document()}, label=f"Add {event.subject}")
        return self._gateway.execute(request)

    def update(
        self,
        event_id: str,
        subject: str,
        days: Iterable[str],
        start_time: str,
        end_time: str,
        location: Optional[str] = None,
        color: Optional[str] = DEFAULT_ENTRY_COLOR,
    ) -> WriteResult:
        event = validate_event(
            subject, days, start_time, end_time, location, color,
            event_id=event_id, user_id=self.user_id,
        )
        request = RetryRequest(
            self.UPDATE,
            {"id": event_id, "document": event.to_document()},
            label=f"Update {event.subject}",
        )
        return self._gateway.execute(request)

    def delete(self, event_id: str) -> WriteResult:
        return self._gateway.execute(RetryRequest(self.DELETE, {"id": event_id}, label="Delete class"))

    def _apply_create(self, payload: Mapping[str, Any]) -> RecurringEvent:
        document = payload["document"]
        doc_id = self._store.add(ENTRIES_COLLECTION, document)
        event = RecurringEvent.from_document({**document, "id": doc_id})
        self.entries.append(event)
        self.entries.sort(key=lambda e: e.start_time)
        return event

    def _apply_update(self, payload: Mapping[str, Any]) -> RecurringEvent:
        doc_id = payload["id"]
        self._store.set(ENTRIES_COLLECTION, doc_id, payload["document"])
        event = RecurringEvent.from_document({**payload["document"], "id": doc_id})
        self.entries = [event if e.id == doc_id else e for e in self.entries]
        self.entries.sort(key=lambda e: e.start_time)
        return event

    def _apply_delete(self, payload: Mapping[str, Any]) -> str:
        doc_id = payload["id"]
        self._store.delete(ENTRIES_COLLECTION, doc_id)
        self.entries = [e for e in self.entries if e.id != doc_id]
        return doc_id


class TodoRepository:
    CREATE = "todos.create"
    SET_COMPLETED = "todos.set_completed"
    DELETE = "todos.delete"

    def __init__(self, store: DocumentStore, gateway: RetryWriteGateway, user_id: int, clock_ms=None):
        self._store = store
        self._gateway = gateway
        self.user_id = user_id
        self._clock_ms = clock_ms or (lambda: to_epoch_ms(now_local()))
        self.todos: List[TodoItem] = []
        gateway.register(self.CREATE, self._apply_create)
        gateway.register(self.SET_COMPLETED, self._apply_set_completed)
        gateway.register(self.DELETE, self._apply_delete)

    def load(self) -> List[TodoItem]:
        documents = self._store.query(TODOS_COLLECTION, userId=self.user_id)
        self.todos = sorted(
            (TodoItem.from_document(d) for d in documents),
            key=lambda t: t.created_at,
            reverse=True,
        )
        return self.todos

    def add(self, text: str) -> WriteResult:
        text = (text or "").strip()
        if not text:
            raise ValidationError({"text": "Todo text is required."})
        item = TodoItem(id=None, text=text, completed=False, created_at=self._clock_ms(), user_id=self.user_id)
        return self._gateway.execute(RetryRequest(self.CREATE, {"document": item.to_document()}, label="Add todo"))

    def toggle(self, todo_id: str) -> WriteResult:
        item = next((t for t in self.todos if t.id == todo_id), None)
        if item is None:
            raise ValidationError({"id": f"No todo with id {todo_id}"})
        # The new value travels in the request so a replay cannot flip it back
        return self.set_completed(todo_id, not item.completed)

    def set_completed(self, todo_id: str, completed: bool) -> WriteResult:
        request = RetryRequest(
            self.SET_COMPLETED,
            {"id": todo_id, "completed": bool(completed)},
            label="Update todo",
        )
        return self._gateway.execute(request)

    def delete(self, todo_id: str) -> WriteResult:
        return self._gateway.execute(RetryRequest(self.DELETE, {"id": todo_id}, label="Delete todo"))

    def _apply_create(self, payload: Mapping[str, Any]) -> TodoItem:
        document = payload["document"]
        doc_id = self._store.add(TODOS_COLLECTION, document)
        item = TodoItem.from_document({**document, "id": doc_id})
        self.todos.insert(0, item)
        return item

    def _apply_set_completed(self, payload: Mapping[str, Any]) -> str:
        doc_id = payload["id"]
        completed = payload["completed"]
        self._store.update(TODOS_COLLECTION, doc_id, {"completed": completed})
        self.todos = [replace(t, completed=completed) if t.id == doc_id else t for t in self.todos]
        return doc_id

    def _apply_delete(self, payload: Mapping[str, Any]) -> str:
        doc_id = payload["id"]
        self._store.delete(TODOS_COLLECTION, doc_id)
        self.todos = [t for t in self.todos if t.id != doc_id]
        return doc_id


class FocusHistoryRepository:
    CREATE = "focus_history.create"

    def __init__(self, store: DocumentStore, gateway: RetryWriteGateway, user_id: int):
        self._store = store
        self._gateway = gateway
        self.user_id = user_id
        self.sessions: List[FocusSession] = []
        gateway.register(self.CREATE, self._apply_create)

    def load(self) -> List[FocusSession]:
        documents = self._store.query(FOCUS_HISTORY_COLLECTION, userId=self.user_id)
        self.sessions = sorted(
            (FocusSession.from_document(d) for d in documents),
            key=lambda s: s.start_time,
            reverse=True,
        )
        return self.sessions

    def record(self, session: FocusSession) -> WriteResult:
        session = replace(session, user_id=self.user_id)
        request = RetryRequest(self.CREATE, {"document": session.to_document()}, label="Save focus session")
        return self._gateway.execute(request)

    def _apply_create(self, payload: Mapping[str, Any]) -> FocusSession:
        document = payload["document"]
        doc_id = self._store.add(FOCUS_HISTORY_COLLECTION, document)
        session = FocusSession.from_document({**document, "id": doc_id})
        self.sessions.insert(0, session)
        return session
