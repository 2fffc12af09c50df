"""In-memory stand-ins for the backend collaborators."""
from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Any, Optional

from domain.models import EnrollmentCreate


class InMemoryEnrollmentRepository:
    """Stands in for the Mongo-backed repository; stamps a strictly increasing clock."""

    def __init__(self):
        self.docs: dict[str, dict[str, Any]] = {}
        self._ids = count(1)
        self._clock = datetime(2024, 6, 1, tzinfo=timezone.utc)
        self.list_calls = 0
        self.fail_writes = False

    def add(self, payload: EnrollmentCreate) -> str:
        if self.fail_writes:
            raise RuntimeError("connection refused")
        self._clock += timedelta(seconds=1)
        enrollment_id = f"{next(self._ids):024x}"
        doc = payload.model_dump()
        doc.update(id=enrollment_id, created_at=self._clock, updated_at=self._clock)
        self.docs[enrollment_id] = doc
        return enrollment_id

    def list_all(self) -> list[dict[str, Any]]:
        self.list_calls += 1
        return [dict(d) for d in self.docs.values()]

    def get(self, enrollment_id: str) -> Optional[dict[str, Any]]:
        doc = self.docs.get(enrollment_id)
        return dict(doc) if doc else None


class FakeObjectStore:
    """Records uploads; any filename listed in ``failing`` raises."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.uploads: list[tuple[str, bytes, str]] = []

    async def upload(self, key: str, data: bytes, content_type: str) -> str:
        if any(key.endswith(f"_{name}") for name in self.failing):
            raise ConnectionError(f"upload refused for {key}")
        self.uploads.append((key, data, content_type))
        return f"https://blobs.example/{key}"


class FakeDocumentStore:
    def __init__(self, fail_with: Optional[Exception] = None):
        self.fail_with = fail_with
        self.writes: list[tuple[str, dict[str, Any]]] = []

    async def add(self, collection: str, document: dict[str, Any]) -> str:
        if self.fail_with is not None:
            raise self.fail_with
        self.writes.append((collection, document))
        return f"doc-{len(self.writes)}"

