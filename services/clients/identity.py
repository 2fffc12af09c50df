from __future__ import annotations

import logging
from collections.abc import Callable

import httpx

from core.config import settings
from domain.models import Identity

logger = logging.getLogger(__name__)

AuthListener = Callable[[Identity | None], None]


class AuthError(Exception):
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def _error_from(r: httpx.Response) -> AuthError:
    try:
        detail = r.json().get("detail")
    except ValueError:
        detail = None
    if isinstance(detail, dict):
        return AuthError(detail.get("code", "unknown"), detail.get("message", r.text))
    return AuthError("unknown", str(detail or r.text or r.reason_phrase))


class IdentityClient:
    """
    Client-side view of the identity provider for one UI session.

    Holds the current token and notifies listeners whenever the signed-in
    identity changes (including sign-out).
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
        timeout: float | None = None,
    ):
        self._http = httpx.Client(
            base_url=(base_url or settings.API_BASE_URL).rstrip("/"),
            timeout=timeout if timeout is not None else settings.HTTP_TIMEOUT_S,
            transport=transport,
        )
        self.token: str | None = None
        self.current_user: Identity | None = None
        self._listeners: list[AuthListener] = []

    # -- notifications ------------------------------------------------------

    def on_auth_state_changed(self, listener: AuthListener) -> Callable[[], None]:
        """Register ``listener``; it is called right away with the current identity."""
        self._listeners.append(listener)
        listener(self.current_user)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_session(self, token: str | None, user: Identity | None) -> None:
        self.token = token
        self.current_user = user
        for listener in list(self._listeners):
            listener(user)

    # -- operations ---------------------------------------------------------

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _adopt(self, token: str) -> Identity:
        r = self._http.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        if r.status_code != 200:
            raise _error_from(r)
        user = Identity.model_validate(r.json())
        self._set_session(token, user)
        return user

    def sign_in_anonymously(self) -> Identity:
        r = self._http.post("/auth/anonymous")
        if r.status_code != 200:
            raise _error_from(r)
        return self._adopt(r.json()["access_token"])

    def sign_in_with_email_and_password(self, email: str, password: str) -> Identity:
        r = self._http.post("/auth/token", data={"username": email, "password": password})
        if r.status_code != 200:
            raise _error_from(r)
        return self._adopt(r.json()["access_token"])

    def sign_out(self) -> None:
        """Drop the local session; the server-side revocation is best effort."""
        token = self.token
        try:
            if token:
                r = self._http.post("/auth/logout", headers={"Authorization": f"Bearer {token}"})
                if r.status_code >= 400:
                    logger.warning("server sign-out returned HTTP %s", r.status_code)
        finally:
            self._set_session(None, None)

    def close(self) -> None:
        self._http.close()
