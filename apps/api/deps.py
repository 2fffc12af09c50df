from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from apps.api.auth import AuthError, IdentityProvider, provider
from core.config import settings
from domain.models import Identity
from services.persistence.mongo import EnrollmentRepository, get_enrollments_collection
from services.persistence.object_store import LocalObjectStore, get_object_store

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


def get_settings():
    """Provides application settings/config globally."""
    return settings


def get_identity_provider() -> IdentityProvider:
    return provider


def get_token(token: str | None = Depends(oauth2_scheme)) -> str:
    if not token:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "not authenticated")
    return token


def get_current_identity(
    token: str = Depends(get_token),
    idp: IdentityProvider = Depends(get_identity_provider),
) -> Identity:
    """Any live session, anonymous ones included."""
    try:
        return idp.identity(token)
    except AuthError as e:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, e.message) from e


def require_admin(
    identity: Identity = Depends(get_current_identity),
    idp: IdentityProvider = Depends(get_identity_provider),
) -> Identity:
    if not idp.is_admin(identity):
        raise HTTPException(status.HTTP_403_FORBIDDEN, "admin access required")
    return identity


def get_enrollment_repo() -> EnrollmentRepository:
    return EnrollmentRepository(get_enrollments_collection())


def get_blob_store() -> LocalObjectStore:
    return get_object_store()
