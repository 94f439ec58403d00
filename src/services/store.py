from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Callable, List, Mapping, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import PyMongoError

from src.schemas.demo_request import REQUIRED_FIELDS, DemoRequest, DemoRequestStatus

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """The document store is unreachable or rejected the operation."""


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DemoRequestStore:
    """Owns every persisted demo request; records live in a MongoDB collection."""

    def __init__(self, collection, clock: Callable[[], datetime] = _utcnow) -> None:
        self._collection = collection
        self._clock = clock

    def create(self, fields: Mapping[str, Optional[str]]) -> DemoRequest:
        missing = [name for name in REQUIRED_FIELDS if not fields.get(name)]
        if missing:
            raise PersistenceError(
                "DemoRequest validation failed: " + ", ".join(f"{name} is required" for name in missing)
            )

        document = {name: fields[name] for name in REQUIRED_FIELDS}
        document["status"] = DemoRequestStatus.PENDING.value
        document["createdAt"] = self._clock()
        try:
            result = self._collection.insert_one(document)
        except PyMongoError as exc:
            raise PersistenceError(str(exc)) from exc

        document["_id"] = result.inserted_id
        logger.info("Demo request %s saved to database", result.inserted_id)
        return DemoRequest.from_document(document)

    def list_all(self) -> List[DemoRequest]:
        try:
            documents = list(self._collection.find().sort("createdAt", DESCENDING))
        except PyMongoError as exc:
            raise PersistenceError(str(exc)) from exc
        return [DemoRequest.from_document(document) for document in documents]

    def update_status(self, request_id: str, status: DemoRequestStatus) -> Optional[DemoRequest]:
        """Set the status of one record; ``None`` means no record has that id."""
        try:
            object_id = ObjectId(request_id)
        except (InvalidId, TypeError):
            return None

        try:
            document = self._collection.find_one_and_update(
                {"_id": object_id},
                {"$set": {"status": DemoRequestStatus(status).value}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as exc:
            raise PersistenceError(str(exc)) from exc
        if document is None:
            return None
        return DemoRequest.from_document(document)

    def ping(self) -> None:
        try:
            self._collection.database.client.admin.command("ping")
        except PyMongoError as exc:
            raise PersistenceError(str(exc)) from exc
