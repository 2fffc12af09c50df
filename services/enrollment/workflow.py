from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from pydantic import ValidationError

from domain.models import ENROLLMENTS_COLLECTION, EnrollmentCreate, PhotoCategory
from domain.value_objects import PhotoRef
from services.enrollment.draft import EnrollmentDraft
from services.enrollment.uploads import (
    ObjectStore,
    build_photo_key,
    build_photo_keys,
    settle_all,
    upload_photo,
)
from services.observability.metrics import timing_metric

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Enrollment submitted successfully!"
FALLBACK_ERROR = "Failed to submit enrollment. Please try again."


class DocumentStore(Protocol):
    async def add(self, collection: str, document: dict[str, Any]) -> str: ...


@dataclass
class SubmissionResult:
    ok: bool
    message: str
    record_id: str | None = None
    record: dict[str, Any] | None = None


async def _upload_student_photo(draft: EnrollmentDraft, objects: ObjectStore) -> PhotoRef:
    photo = draft.student_photo
    if photo is None:
        return PhotoRef()
    key = build_photo_key(PhotoCategory.STUDENT, photo.filename)
    try:
        url = await upload_photo(objects, key, photo)
    except Exception:  # noqa: BLE001
        # photo is optional; the enrollment still goes through without it
        logger.exception("student photo upload failed: %s", photo.filename)
        return PhotoRef()
    return PhotoRef(url=url, name=photo.filename)


async def _upload_contact_photos(draft: EnrollmentDraft, objects: ObjectStore) -> list[PhotoRef]:
    refs = [PhotoRef() for _ in draft.contacts]
    pending = [(i, c.photo) for i, c in enumerate(draft.contacts) if c.photo is not None]
    # keys are fixed before the fan-out so no two uploads share one
    keys = build_photo_keys(PhotoCategory.CONTACT, [photo.filename for _, photo in pending])
    outcomes = await settle_all(
        upload_photo(objects, key, photo) for key, (_, photo) in zip(keys, pending)
    )
    for (i, photo), outcome in zip(pending, outcomes):
        if outcome.ok:
            refs[i] = PhotoRef(url=outcome.value, name=photo.filename)
        else:
            logger.error(
                "contact photo upload failed (contact %d, %s): %s", i + 1, photo.filename, outcome.error
            )
    return refs


def build_payload(
    draft: EnrollmentDraft, student_photo: PhotoRef, contact_photos: list[PhotoRef]
) -> EnrollmentCreate:
    """Assemble the write payload; file handles stay behind in the draft."""
    return EnrollmentCreate(
        **draft.form.as_dict(),
        student_photo_url=student_photo.url,
        student_photo_name=student_photo.name,
        contacts=[c.to_record(ref) for c, ref in zip(draft.contacts, contact_photos)],
    )


async def submit_enrollment(
    draft: EnrollmentDraft, objects: ObjectStore, documents: DocumentStore
) -> SubmissionResult:
    """
    Upload photos best-effort, then write exactly one enrollment document.

    On success the draft is reset to its defaults. On a failed write the
    draft is left untouched so the user can resubmit; blobs already
    uploaded are not removed.
    """
    missing = draft.missing_fields()
    if missing:
        return SubmissionResult(ok=False, message="Please fill in: " + ", ".join(missing))

    student_photo = await _upload_student_photo(draft, objects)
    contact_photos = await _upload_contact_photos(draft, objects)

    try:
        payload = build_payload(draft, student_photo, contact_photos)
        document = payload.model_dump()
        with timing_metric("enrollment write"):
            record_id = await documents.add(ENROLLMENTS_COLLECTION, document)
    except ValidationError as e:
        logger.warning("enrollment payload rejected: %s", e)
        return SubmissionResult(ok=False, message=FALLBACK_ERROR)
    except Exception as e:  # noqa: BLE001
        logger.exception("error submitting enrollment")
        return SubmissionResult(ok=False, message=str(e) or FALLBACK_ERROR)

    draft.reset()
    logger.info("enrollment %s submitted", record_id)
    return SubmissionResult(ok=True, message=SUCCESS_MESSAGE, record_id=record_id, record=document)
