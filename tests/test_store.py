import pytest

from studydesk.services.errors import ErrorKind, StoreError, classify_error


def add_todo(store, user_id, text="Read chapter 3", created_at=1):
    return store.add("todos", {"text": text, "completed": False, "createdAt": created_at, "userId": user_id})


def test_add_then_get_returns_document_with_id(store, user_id):
    doc_id = add_todo(store, user_id)
    assert store.get("todos", doc_id) == {
        "id": doc_id,
        "text": "Read chapter 3",
        "completed": False,
        "createdAt": 1,
        "userId": user_id,
    }


def test_get_missing_returns_none(store):
    assert store.get("todos", "missing") is None


def test_update_changes_only_given_fields(store, user_id):
    doc_id = add_todo(store, user_id)
    store.update("todos", doc_id, {"completed": True})
    document = store.get("todos", doc_id)
    assert document["completed"] is True
    assert document["text"] == "Read chapter 3"


def test_set_overwrites_entry(store, user_id):
    doc_id = store.add("entries", {
        "days": ["Monday"], "startTime": "09:00", "endTime": "10:00",
        "subject": "Math", "location": "Room 1", "color": "#3b82f6", "userId": user_id,
    })
    store.set("entries", doc_id, {
        "days": ["Tuesday", "Thursday"], "startTime": "11:00", "endTime": "12:30",
        "subject": "Physics", "location": None, "color": "#ef4444", "userId": user_id,
    })
    document = store.get("entries", doc_id)
    assert document["days"] == ["Tuesday", "Thursday"]
    assert document["subject"] == "Physics"
    assert document["location"] is None


def test_query_filters_by_equality(store, user_id):
    add_todo(store, user_id, "a")
    done = add_todo(store, user_id, "b")
    store.update("todos", done, {"completed": True})
    add_todo(store, user_id + 1, "other user")
    assert {d["text"] for d in store.query("todos", userId=user_id)} == {"a", "b"}
    assert [d["id"] for d in store.query("todos", userId=user_id, completed=True)] == [done]


def test_delete_and_delete_where(store, user_id):
    first = add_todo(store, user_id, "a")
    add_todo(store, user_id, "b")
    add_todo(store, user_id, "c")
    store.delete("todos", first)
    assert store.get("todos", first) is None
    assert store.delete_where("todos", userId=user_id) == 2
    assert store.query("todos", userId=user_id) == []


@pytest.mark.parametrize("operation", [
    lambda store: store.update("todos", "missing", {"completed": True}),
    lambda store: store.delete("todos", "missing"),
    lambda store: store.set("todos", "missing", {"text": "x"}),
])
def test_missing_document_raises_not_found(store, operation):
    with pytest.raises(StoreError) as exc_info:
        operation(store)
    assert exc_info.value.code == "store/not-found"
    assert classify_error(exc_info.value) == ErrorKind.STORE


def test_unknown_collection_and_fields_rejected(store, user_id):
    with pytest.raises(StoreError) as exc_info:
        store.query("grades")
    assert exc_info.value.code == "store/invalid-argument"
    with pytest.raises(StoreError):
        store.add("todos", {"text": "a", "createdAt": 1, "userId": user_id, "priority": "high"})


def test_focus_history_document(store, user_id):
    doc_id = store.add("focus_history", {"startTime": 1_700_000_000_000, "duration": 25,
                                         "completed": True, "userId": user_id})
    assert store.get("focus_history", doc_id)["duration"] == 25
