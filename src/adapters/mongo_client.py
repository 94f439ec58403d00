from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from pymongo import MongoClient


@dataclass
class MongoClientFactory:
    uri: str
    db_name: str
    timeout_ms: int = 5000
    _client: Optional[MongoClient] = field(default=None, init=False, repr=False)

    def client(self) -> MongoClient:
        # MongoClient is lazy and pools connections; one per process.
        if self._client is None:
            self._client = MongoClient(self.uri, serverSelectionTimeoutMS=self.timeout_ms, tz_aware=True)
        return self._client

    def get_collection(self, collection_name: str):
        database = self.client()[self.db_name]
        return database[collection_name]

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
