# residency_vote/storage.py
# Persistence of the election state for the development chain host.
import json
import logging
import os
from typing import Any, Dict, Optional

from pymongo import MongoClient

from residency_vote.config import (
    ELECTION_DB_PATH,
    ELECTION_ID,
    ELECTION_STORE,
    ELECTIONS_COLLECTION_NAME,
    MONGO_DB,
    MONGO_URI,
)
from residency_vote.voting_contract import ElectionState

logger = logging.getLogger(__name__)


class MemoryStore:
    """Keeps the state in process only."""

    def __init__(self):
        self._doc: Optional[Dict[str, Any]] = None

    def load(self) -> Optional[ElectionState]:
        if self._doc is None:
            return None
        return ElectionState.from_document(self._doc)

    def save(self, state: ElectionState) -> None:
        self._doc = state.to_document()


class JsonFileStore:
    """
    Stores elections in a JSON file: {"elections": {election_id: document}}.
    An empty or corrupted file is treated as holding no elections.
    """

    def __init__(self, path: str = ELECTION_DB_PATH, election_id: str = ELECTION_ID):
        self.path = path
        self.election_id = election_id
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)

    def _read_db(self) -> Dict[str, Any]:
        try:
            with open(self.path, "r") as f:
                return json.load(f)
        except FileNotFoundError:
            return {"elections": {}}
        except json.JSONDecodeError:
            logger.warning(f"Election file {self.path} is not valid JSON, starting empty")
            return {"elections": {}}

    def _write_db(self, data: Dict[str, Any]) -> None:
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, self.path)

    def load(self) -> Optional[ElectionState]:
        doc = self._read_db().get("elections", {}).get(self.election_id)
        if doc is None:
            return None
        return ElectionState.from_document(doc)

    def save(self, state: ElectionState) -> None:
        db = self._read_db()
        db.setdefault("elections", {})[self.election_id] = state.to_document()
        self._write_db(db)


class MongoStore:
    """Stores each election as one document in the elections collection, keyed by election id."""

    def __init__(self, election_id: str = ELECTION_ID, collection=None):
        self.election_id = election_id
        if collection is not None:
            self.client = None
            self.collection = collection
            return
        try:
            self.client = MongoClient(MONGO_URI)
            self.collection = self.client[MONGO_DB][ELECTIONS_COLLECTION_NAME]
            self.client.server_info()
            logger.info(f"Connected to MongoDB at {MONGO_URI}, database: {MONGO_DB}")
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    def load(self) -> Optional[ElectionState]:
        doc = self.collection.find_one({"_id": self.election_id})
        if doc is None:
            return None
        doc.pop("_id", None)
        return ElectionState.from_document(doc)

    def save(self, state: ElectionState) -> None:
        self.collection.replace_one({"_id": self.election_id}, state.to_document(), upsert=True)
        logger.info(f"Election {self.election_id} saved")

    def close(self):
        if self.client is not None:
            self.client.close()
            logger.info("MongoDB connection closed")


def create_store():
    if ELECTION_STORE == "mongo":
        return MongoStore()
    if ELECTION_STORE == "json":
        return JsonFileStore()
    if ELECTION_STORE == "memory":
        return MemoryStore()
    raise ValueError(f"Unknown ELECTION_STORE: {ELECTION_STORE}")
