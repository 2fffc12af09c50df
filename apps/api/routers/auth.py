from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from apps.api.auth import AuthError, IdentityProvider
from apps.api.deps import get_current_identity, get_identity_provider, get_token
from domain.models import Identity, Token

router = APIRouter(prefix="/auth", tags=["auth"])

_STATUS = {
    "user-not-found": status.HTTP_401_UNAUTHORIZED,
    "invalid-credential": status.HTTP_401_UNAUTHORIZED,
    "not-configured": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@router.post("/anonymous", response_model=Token)
def sign_in_anonymously(idp: IdentityProvider = Depends(get_identity_provider)):
    return Token(access_token=idp.sign_in_anonymously())


@router.post("/token", response_model=Token)
def login(
    form: OAuth2PasswordRequestForm = Depends(),  # noqa: B008 (FastAPI)
    idp: IdentityProvider = Depends(get_identity_provider),
):
    try:
        tok = idp.sign_in_with_password(form.username, form.password)
    except AuthError as e:
        raise HTTPException(
            _STATUS.get(e.code, status.HTTP_401_UNAUTHORIZED),
            {"code": e.code, "message": e.message},
        ) from e
    return Token(access_token=tok)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    token: str = Depends(get_token),
    idp: IdentityProvider = Depends(get_identity_provider),
):
    try:
        idp.sign_out(token)
    except AuthError as e:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, e.message) from e


@router.get("/me", response_model=Identity)
def me(identity: Identity = Depends(get_current_identity)):
    return identity
