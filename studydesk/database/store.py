"""Document-store interface and its SQLAlchemy implementation.

Documents are plain dicts keyed the way they are persisted
(``startTime``, ``userId``...). Every read returns the document with its
store-assigned ``id``.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, sessionmaker

from studydesk.database.models import Entry, FocusHistory, Todo
from studydesk.services.errors import StoreError
from studydesk.utils.constants import (
    ENTRIES_COLLECTION,
    FOCUS_HISTORY_COLLECTION,
    TODOS_COLLECTION,
)
from studydesk.utils.logging_handler import setup_logger

logger = setup_logger(__name__)


class DocumentStore(ABC):
    """CRUD plus query-by-equality over named collections"""

    @abstractmethod
    def add(self, collection: str, data: Dict[str, Any]) -> str:
        """Create a document and return its id"""

    @abstractmethod
    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Overwrite every field of an existing document"""

    @abstractmethod
    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        """Overwrite the given fields of an existing document"""

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> None:
        pass

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    def query(self, collection: str, **equals: Any) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def delete_where(self, collection: str, **equals: Any) -> int:
        """Delete every matching document and return how many were removed"""


# collection -> (model, {document field: column attribute})
_COLLECTIONS = {
    ENTRIES_COLLECTION: (Entry, {
        "days": "days",
        "startTime": "start_time",
        "endTime": "end_time",
        "subject": "subject",
        "location": "location",
        "color": "color",
        "userId": "user_id",
    }),
    TODOS_COLLECTION: (Todo, {
        "text": "text",
        "completed": "completed",
        "createdAt": "created_at",
        "userId": "user_id",
    }),
    FOCUS_HISTORY_COLLECTION: (FocusHistory, {
        "startTime": "start_time",
        "duration": "duration",
        "completed": "completed",
        "userId": "user_id",
    }),
}


class SqlDocumentStore(DocumentStore):
    """DocumentStore backed by the SQLAlchemy models"""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _mapping(self, collection: str):
        try:
            return _COLLECTIONS[collection]
        except KeyError:
            raise StoreError(f"Unknown collection: {collection}", code="store/invalid-argument") from None

    def _columns(self, fields: Dict[str, str], data: Dict[str, Any]) -> Dict[str, Any]:
        unknown = set(data) - set(fields) - {"id"}
        if unknown:
            raise StoreError(f"Unknown fields: {', '.join(sorted(unknown))}", code="store/invalid-argument")
        return {fields[key]: value for key, value in data.items() if key != "id"}

    def _to_document(self, row, fields: Dict[str, str]) -> Dict[str, Any]:
        document = {key: getattr(row, column) for key, column in fields.items()}
        document["id"] = row.id
        return document

    def _get_row(self, db: Session, collection: str, doc_id: str):
        model, _ = self._mapping(collection)
        row = db.get(model, doc_id)
        if row is None:
            raise StoreError(f"No document {doc_id} in {collection}", code="store/not-found")
        return row

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        model, fields = self._mapping(collection)
        db = self._session_factory()
        try:
            row = model(**self._columns(fields, data))
            db.add(row)
            db.commit()
            db.refresh(row)
            logger.debug("Added %s/%s", collection, row.id)
            return row.id
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        _, fields = self._mapping(collection)
        full = {key: data.get(key) for key in fields}
        self.update(collection, doc_id, full)

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        _, mapping = self._mapping(collection)
        db = self._session_factory()
        try:
            row = self._get_row(db, collection, doc_id)
            for column, value in self._columns(mapping, fields).items():
                setattr(row, column, value)
            db.commit()
            logger.debug("Updated %s/%s", collection, doc_id)
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def delete(self, collection: str, doc_id: str) -> None:
        db = self._session_factory()
        try:
            row = self._get_row(db, collection, doc_id)
            db.delete(row)
            db.commit()
            logger.debug("Deleted %s/%s", collection, doc_id)
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        model, fields = self._mapping(collection)
        db = self._session_factory()
        try:
            row = db.get(model, doc_id)
            return self._to_document(row, fields) if row is not None else None
        finally:
            db.close()

    def query(self, collection: str, **equals: Any) -> List[Dict[str, Any]]:
        model, fields = self._mapping(collection)
        db = self._session_factory()
        try:
            q = db.query(model)
            for column, value in self._columns(fields, equals).items():
                q = q.filter(getattr(model, column) == value)
            return [self._to_document(row, fields) for row in q.all()]
        finally:
            db.close()

    def delete_where(self, collection: str, **equals: Any) -> int:
        model, fields = self._mapping(collection)
        db = self._session_factory()
        try:
            q = db.query(model)
            for column, value in self._columns(fields, equals).items():
                q = q.filter(getattr(model, column) == value)
            count = q.delete(synchronize_session=False)
            db.commit()
            logger.info("Deleted %d documents from %s", count, collection)
            return count
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
