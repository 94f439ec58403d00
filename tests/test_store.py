from __future__ import annotations

from datetime import UTC, datetime

import pytest
from bson import ObjectId

from src.schemas.demo_request import DemoRequestStatus
from src.services.store import DemoRequestStore, PersistenceError


def test_create_assigns_id_pending_status_and_timestamp(store, collection, submission):
    before = datetime.now(UTC)
    record = store.create(submission)

    assert record.status == DemoRequestStatus.PENDING
    assert record.created_at >= before
    assert ObjectId.is_valid(record.id)
    assert len(collection.documents) == 1
    assert collection.documents[0]["status"] == "pending"

    listed = store.list_all()
    assert [item.id for item in listed] == [record.id]


def test_create_rejects_missing_required_field(store, collection, submission):
    submission["company"] = ""

    with pytest.raises(PersistenceError, match="company is required"):
        store.create(submission)
    assert collection.documents == []


def test_create_wraps_driver_errors(store, collection, submission):
    collection.unreachable = True

    with pytest.raises(PersistenceError, match="Connection refused"):
        store.create(submission)
    assert collection.documents == []


def test_list_all_orders_newest_first_regardless_of_insertion(collection, clock, submission):
    store = DemoRequestStore(collection=collection, clock=clock)
    first = store.create({**submission, "name": "First"})
    second = store.create({**submission, "name": "Second"})
    third = store.create({**submission, "name": "Third"})
    # Shuffle the physical order so only the sort decides the result.
    collection.documents.reverse()
    collection.documents.insert(0, collection.documents.pop(1))

    listed = store.list_all()

    assert [item.id for item in listed] == [third.id, second.id, first.id]
    assert listed[0].created_at > listed[1].created_at > listed[2].created_at


def test_list_all_on_empty_store(store):
    assert store.list_all() == []


def test_update_status_changes_only_status(store, collection, submission):
    record = store.create(submission)
    before = dict(collection.documents[0])

    updated = store.update_status(record.id, DemoRequestStatus.CONTACTED)

    assert updated is not None
    assert updated.status == DemoRequestStatus.CONTACTED
    after = collection.documents[0]
    assert after["status"] == "contacted"
    assert {k: v for k, v in after.items() if k != "status"} == {
        k: v for k, v in before.items() if k != "status"
    }
    assert updated.model_dump(exclude={"status"}) == record.model_dump(exclude={"status"})


@pytest.mark.parametrize("request_id", [str(ObjectId()), "not-an-object-id"])
def test_update_status_unknown_id_returns_none(store, collection, submission, request_id):
    store.create(submission)
    snapshot = [dict(document) for document in collection.documents]

    assert store.update_status(request_id, DemoRequestStatus.COMPLETED) is None
    assert collection.documents == snapshot


def test_update_status_wraps_driver_errors(store, collection, submission):
    record = store.create(submission)
    collection.unreachable = True

    with pytest.raises(PersistenceError):
        store.update_status(record.id, DemoRequestStatus.COMPLETED)
