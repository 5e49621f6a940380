import threading

import pytest

from harmwatch.core.errors import StorageError
from harmwatch.db.repository import case_repository, user_repository
from harmwatch.models import Case, User


def _case(**kw):
    defaults = {"title": "T", "description": "D", "category": "bias", "created_by": "u1"}
    defaults.update(kw)
    return Case(**defaults)


def test_insert_and_find(store):
    repo = case_repository(store)
    case = repo.insert(_case(title="first"))

    assert repo.find_by_id(case.id).title == "first"
    assert [c.id for c in repo.find_all()] == [case.id]
    assert repo.find_by_id("missing") is None
    assert repo.count() == 1


def test_documents_use_camel_case(store):
    case_repository(store).insert(_case(detailed_description="more"))
    doc = store.load_all("cases")[0]
    assert doc["detailedDescription"] == "more"
    assert doc["createdBy"] == "u1"
    assert "evidenceCount" in doc


def test_find_where(store):
    repo = case_repository(store)
    repo.insert(_case(category="bias"))
    repo.insert(_case(category="privacy"))
    assert [c.category for c in repo.find_where(lambda c: c.category == "privacy")] == ["privacy"]


def test_update(store):
    repo = case_repository(store)
    case = repo.insert(_case())

    updated = repo.update(case.id, lambda c: setattr(c, "status", "verified"))
    assert updated.status == "verified"
    assert repo.find_by_id(case.id).status == "verified"
    assert repo.update("missing", lambda c: None) is None


def test_failed_mutation_writes_nothing(store):
    repo = case_repository(store)
    case = repo.insert(_case())

    def boom(c):
        c.status = "verified"
        raise RuntimeError("abort")

    with pytest.raises(RuntimeError):
        repo.update(case.id, boom)
    assert repo.find_by_id(case.id).status == "pending"


def test_malformed_records_are_skipped_but_kept(store):
    store.save_all("users", [{"id": "broken"}])
    repo = user_repository(store)

    assert repo.find_all() == []
    repo.insert(User(username="a", email="a@x.com"))
    ids = [doc["id"] for doc in store.load_all("users")]
    assert ids[0] == "broken"
    assert len(ids) == 2


def test_save_failure_raises_storage_error(store, monkeypatch):
    monkeypatch.setattr(store, "save_all", lambda collection, records: False)
    with pytest.raises(StorageError) as exc:
        case_repository(store).insert(_case())
    assert exc.value.message == "Failed to save cases"


def test_concurrent_inserts_are_not_lost(store):
    repo = case_repository(store)

    def submit(i):
        repo.insert(_case(title=f"case {i}"))

    threads = [threading.Thread(target=submit, args=(i,)) for i in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert repo.count() == 20
