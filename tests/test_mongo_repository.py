from datetime import datetime, timedelta, timezone

import mongomock
import pytest
from bson import ObjectId

from domain.models import ENROLLMENTS_COLLECTION, EnrollmentCreate
from services.persistence.mongo import EnrollmentRepository

PAYLOAD = {
    "student_name": "Aarav Shah",
    "grade": "5",
    "board": "CBSE",
    "academic_year": "2024-2025",
    "contacts": [{"phone": "98000", "contact_name": "Meera Shah", "relation": "parent"}],
}


@pytest.fixture
def collection():
    return mongomock.MongoClient()["enrollment"][ENROLLMENTS_COLLECTION]


@pytest.fixture
def mongo_repo(collection):
    return EnrollmentRepository(collection)


def test_add_stamps_server_time(mongo_repo, collection):
    payload = EnrollmentCreate.model_validate(
        dict(PAYLOAD, created_at="1999-01-01T00:00:00Z", updated_at="1999-01-01T00:00:00Z")
    )
    before = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(seconds=1)

    enrollment_id = mongo_repo.add(payload)

    doc = collection.find_one({"_id": ObjectId(enrollment_id)})
    assert doc["created_at"] == doc["updated_at"]
    assert doc["created_at"].replace(tzinfo=None) >= before
    assert doc["contacts"][0]["contact_name"] == "Meera Shah"


def test_list_all_maps_object_ids(mongo_repo):
    first = mongo_repo.add(EnrollmentCreate.model_validate(PAYLOAD))
    second = mongo_repo.add(EnrollmentCreate.model_validate(dict(PAYLOAD, student_name="Bina")))

    records = mongo_repo.list_all()

    assert {r["id"] for r in records} == {first, second}
    assert all(isinstance(r["id"], str) and "_id" not in r for r in records)


def test_get_by_id(mongo_repo):
    enrollment_id = mongo_repo.add(EnrollmentCreate.model_validate(PAYLOAD))

    record = mongo_repo.get(enrollment_id)

    assert record["id"] == enrollment_id
    assert "_id" not in record
    assert record["student_name"] == "Aarav Shah"


def test_get_unknown_or_malformed_id_returns_none(mongo_repo):
    assert mongo_repo.get("not-an-oid") is None
    assert mongo_repo.get(str(ObjectId())) is None
