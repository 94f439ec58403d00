from __future__ import annotations

import smtplib
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace

import pytest
from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import ServerSelectionTimeoutError

from src.adapters.email_client import NotificationError
from src.services.demo_request import DemoRequestService
from src.services.store import DemoRequestStore


class FakeCursor:
    def __init__(self, documents) -> None:
        self._documents = documents

    def sort(self, key, direction):
        ordered = sorted(self._documents, key=lambda document: document[key], reverse=direction == DESCENDING)
        return FakeCursor(ordered)

    def __iter__(self):
        return iter(self._documents)


class FakeCollection:
    """Just enough of a pymongo collection for the demo request store."""

    def __init__(self) -> None:
        self.documents = []
        self.unreachable = False

    def _check(self) -> None:
        if self.unreachable:
            raise ServerSelectionTimeoutError("localhost:27017: [Errno 111] Connection refused")

    def insert_one(self, document):
        self._check()
        document.setdefault("_id", ObjectId())
        self.documents.append(dict(document))
        return SimpleNamespace(inserted_id=document["_id"])

    def find(self, filter=None):
        self._check()
        return FakeCursor([dict(document) for document in self.documents])

    @property
    def database(self):
        return SimpleNamespace(client=SimpleNamespace(admin=self))

    def command(self, name):
        self._check()
        return {"ok": 1.0}

    def find_one_and_update(self, filter, update, return_document=ReturnDocument.BEFORE):
        self._check()
        for document in self.documents:
            if document["_id"] == filter["_id"]:
                before = dict(document)
                document.update(update["$set"])
                return dict(document) if return_document == ReturnDocument.AFTER else before
        return None


class FakeEmailClient:
    def __init__(self, fail_for=(), fail_all: bool = False) -> None:
        self.fail_for = set(fail_for)
        self.fail_all = fail_all
        self.verify_error = None
        self.attempts = []
        self.sent = []

    def send(self, message):
        self.attempts.append(message)
        if self.fail_all or message.recipient in self.fail_for:
            raise NotificationError(f"Invalid login: 535 Authentication failed for {message.recipient}")
        self.sent.append(message)
        return {"recipient": message.recipient, "subject": message.subject}

    def verify(self) -> None:
        if self.verify_error is not None:
            raise self.verify_error


class SteppingClock:
    def __init__(self, start: datetime, step: timedelta = timedelta(minutes=1)) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


@pytest.fixture()
def collection():
    return FakeCollection()


@pytest.fixture()
def email_client():
    return FakeEmailClient()


@pytest.fixture()
def store(collection):
    return DemoRequestStore(collection=collection)


@pytest.fixture()
def clock():
    return SteppingClock(datetime(2024, 5, 1, 9, 0, tzinfo=UTC))


@pytest.fixture()
def service(store, email_client):
    return DemoRequestService(
        store=store,
        email_client=email_client,
        sender_email="noreply@staffma.com",
        company_email="sales@staffma.com",
    )


@pytest.fixture()
def submission():
    return {
        "name": "Jane Doe",
        "email": "jane@x.com",
        "phone": "+1555",
        "company": "Acme",
        "message": "Interested",
    }


class FakeSMTP:
    instances: list = []
    login_error: Exception | None = None
    starttls_error: Exception | None = None

    def __init__(self, host, port, timeout=None, context=None) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        self.credentials = None
        self.started_tls = False
        self.closed = False
        self.messages = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True
        return False

    def starttls(self, context=None):
        if FakeSMTP.starttls_error is not None:
            raise FakeSMTP.starttls_error
        self.started_tls = True

    def login(self, user, password):
        if FakeSMTP.login_error is not None:
            raise FakeSMTP.login_error
        self.credentials = (user, password)

    def send_message(self, message):
        self.messages.append(message)
        return {}

    def noop(self):
        return (250, b"OK")

    def close(self):
        self.closed = True


@pytest.fixture()
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.login_error = None
    FakeSMTP.starttls_error = None
    monkeypatch.setattr(smtplib, "SMTP_SSL", FakeSMTP)
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    return FakeSMTP
