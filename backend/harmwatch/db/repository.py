import logging
from typing import Callable, Generic, Optional, TypeVar

from pydantic import ValidationError as PydanticValidationError

from harmwatch.core.errors import StorageError
from harmwatch.db.store import JsonStore
from harmwatch.models import Case, Evidence, User
from harmwatch.models.base import Record

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=Record)


class Repository(Generic[RecordT]):
    """CRUD over one collection.

    Nothing is cached between calls: every operation loads the full
    collection. Writes hold the collection lock from load to save so
    concurrent writers cannot overwrite each other's changes.
    """

    def __init__(self, store: JsonStore, collection: str, model: type[RecordT]):
        self.store = store
        self.collection = collection
        self.model = model

    def lock(self):
        return self.store.lock(self.collection)

    def _parse(self, doc: dict) -> Optional[RecordT]:
        try:
            return self.model.model_validate(doc)
        except PydanticValidationError:
            logger.warning(
                "Skipping malformed %s record %r",
                self.collection,
                doc.get("id") if isinstance(doc, dict) else None,
                extra={"collection": self.collection},
            )
            return None

    def _save(self, docs: list[dict]) -> None:
        if not self.store.save_all(self.collection, docs):
            raise StorageError(f"Failed to save {self.collection}")

    def find_all(self) -> list[RecordT]:
        records = []
        for doc in self.store.load_all(self.collection):
            record = self._parse(doc)
            if record is not None:
                records.append(record)
        return records

    def find_where(self, predicate: Callable[[RecordT], bool]) -> list[RecordT]:
        return [r for r in self.find_all() if predicate(r)]

    def find_by_id(self, record_id: str) -> Optional[RecordT]:
        for doc in self.store.load_all(self.collection):
            if isinstance(doc, dict) and doc.get("id") == record_id:
                return self._parse(doc)
        return None

    def count(self) -> int:
        return len(self.find_all())

    def insert(self, record: RecordT) -> RecordT:
        with self.lock():
            docs = self.store.load_all(self.collection)
            docs.append(record.to_document())
            self._save(docs)
        return record

    def update(self, record_id: str, mutation: Callable[[RecordT], None]) -> Optional[RecordT]:
        """Apply ``mutation`` to the stored record and persist it.

        Returns None when no record has ``record_id``. If ``mutation`` raises,
        nothing is written.
        """
        with self.lock():
            docs = self.store.load_all(self.collection)
            for index, doc in enumerate(docs):
                if isinstance(doc, dict) and doc.get("id") == record_id:
                    break
            else:
                return None

            current = self._parse(docs[index])
            if current is None:
                return None
            updated = current.model_copy(deep=True)
            mutation(updated)
            docs[index] = updated.to_document()
            self._save(docs)
        return updated


def case_repository(store: JsonStore) -> Repository[Case]:
    return Repository(store, "cases", Case)


def evidence_repository(store: JsonStore) -> Repository[Evidence]:
    return Repository(store, "evidence", Evidence)


def user_repository(store: JsonStore) -> Repository[User]:
    return Repository(store, "users", User)
