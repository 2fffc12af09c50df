from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Protocol

import httpx

from core.config import settings
from domain.models import ENROLLMENTS_COLLECTION, EnrollmentRecord

logger = logging.getLogger(__name__)

FALLBACK_ERROR = "Failed to fetch enrollment data"


class DocumentReader(Protocol):
    async def get_all(self, collection: str) -> list[dict[str, Any]]: ...


def sort_newest_first(records: list[EnrollmentRecord]) -> list[EnrollmentRecord]:
    """
    Order by ``created_at`` descending.

    Records without a timestamp keep the slot they were read into; only the
    timestamped ones are reordered among their own slots.
    """
    slots = [i for i, r in enumerate(records) if r.created_at is not None]
    ordered = sorted((records[i] for i in slots), key=lambda r: r.created_at, reverse=True)
    out = list(records)
    for i, rec in zip(slots, ordered):
        out[i] = rec
    return out


def format_submitted(ts: datetime | None) -> str:
    if ts is None:
        return "N/A"
    return ts.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def student_photo_filename(record: EnrollmentRecord) -> str:
    return f"{record.student_name}_photo.jpg"


def contact_photo_filename(contact_name: str, relation: str) -> str:
    return f"{contact_name}_{relation}_photo.jpg"


class EnrollmentListing:
    """
    Dashboard state for one mount: records are read once and kept in memory;
    selecting a record never triggers another read.
    """

    def __init__(self, reader: DocumentReader):
        self._reader = reader
        self.records: list[EnrollmentRecord] = []
        self.error: str | None = None
        self.loaded = False
        self.selected_id: str | None = None

    async def load(self) -> list[EnrollmentRecord]:
        if self.loaded:
            return self.records
        try:
            raw = await self._reader.get_all(ENROLLMENTS_COLLECTION)
            self.records = sort_newest_first([EnrollmentRecord.model_validate(d) for d in raw])
        except Exception as e:  # noqa: BLE001
            logger.exception("error fetching enrollments")
            self.records = []
            self.error = str(e) or FALLBACK_ERROR
        finally:
            self.loaded = True
        return self.records

    @property
    def total(self) -> int:
        return len(self.records)

    def select(self, enrollment_id: str) -> EnrollmentRecord | None:
        self.selected_id = enrollment_id
        return self.selected

    @property
    def selected(self) -> EnrollmentRecord | None:
        for r in self.records:
            if r.id == self.selected_id:
                return r
        return None


def download_photo(url: str, *, transport: httpx.BaseTransport | None = None) -> bytes:
    """Fetch a stored photo for a client-side save; errors propagate as-is."""
    with httpx.Client(timeout=settings.HTTP_TIMEOUT_S, transport=transport) as client:
        r = client.get(url)
    r.raise_for_status()
    return r.content
