from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, MongoClient
from pymongo.collection import Collection

from core.config import settings
from domain.models import ENROLLMENTS_COLLECTION, EnrollmentCreate

logger = logging.getLogger(__name__)


@lru_cache
def get_mongo_client() -> MongoClient:
    return MongoClient(settings.MONGO_URL, serverSelectionTimeoutMS=2000, tz_aware=True)


def get_enrollments_collection() -> Collection:
    db = get_mongo_client()[settings.MONGO_DB]
    col = db[ENROLLMENTS_COLLECTION]
    col.create_index([("created_at", DESCENDING)])
    return col


def _to_record(doc: dict[str, Any]) -> dict[str, Any]:
    out = dict(doc)
    out["id"] = str(out.pop("_id"))
    return out


class EnrollmentRepository:
    """
    Append-only access to the ``enrollments`` collection.
    Contacts are embedded as an ordered list inside each document.
    """

    def __init__(self, collection: Collection):
        self._col = collection

    def add(self, payload: EnrollmentCreate) -> str:
        # timestamps come from the server clock, never from the submitter
        now = datetime.now(timezone.utc)
        doc = payload.model_dump()
        doc["created_at"] = now
        doc["updated_at"] = now
        res = self._col.insert_one(doc)
        logger.info("enrollment %s stored (%d contacts)", res.inserted_id, len(payload.contacts))
        return str(res.inserted_id)

    def list_all(self) -> list[dict[str, Any]]:
        return [_to_record(d) for d in self._col.find({})]

    def get(self, enrollment_id: str) -> dict[str, Any] | None:
        try:
            oid = ObjectId(enrollment_id)
        except (InvalidId, TypeError):
            return None
        doc = self._col.find_one({"_id": oid})
        return _to_record(doc) if doc else None
