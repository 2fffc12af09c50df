import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from apps.api.deps import get_current_identity, get_enrollment_repo, require_admin
from domain.models import EnrollmentCreate, EnrollmentCreated, EnrollmentRecord, Identity
from services.persistence.mongo import EnrollmentRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/enrollments", tags=["enrollments"])


@router.post("", response_model=EnrollmentCreated, status_code=status.HTTP_201_CREATED)
def create_enrollment(
    payload: EnrollmentCreate,
    identity: Identity = Depends(get_current_identity),
    repo: EnrollmentRepository = Depends(get_enrollment_repo),
):
    try:
        enrollment_id = repo.add(payload)
    except Exception as e:  # noqa: BLE001
        logger.exception("enrollment write failed for uid=%s", identity.uid)
        raise HTTPException(status_code=500, detail=f"db error: {e}") from e
    return EnrollmentCreated(id=enrollment_id)


@router.get("", response_model=List[EnrollmentRecord])
def list_enrollments(
    admin: Identity = Depends(require_admin),
    repo: EnrollmentRepository = Depends(get_enrollment_repo),
):
    try:
        return repo.list_all()
    except Exception as e:  # noqa: BLE001
        logger.exception("enrollment listing failed")
        raise HTTPException(status_code=500, detail=f"db error: {e}") from e


@router.get("/{enrollment_id}", response_model=EnrollmentRecord)
def get_enrollment(
    enrollment_id: str,
    admin: Identity = Depends(require_admin),
    repo: EnrollmentRepository = Depends(get_enrollment_repo),
):
    result = repo.get(enrollment_id)
    if not result:
        raise HTTPException(status_code=404, detail="Enrollment not found")
    return result
