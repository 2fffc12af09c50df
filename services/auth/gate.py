from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol

from core.config import settings
from domain.models import Identity

logger = logging.getLogger(__name__)

PUBLIC_ROUTE = "/"
ADMIN_ROUTE = "/admin"

ACCESS_DENIED = "Access denied. Only administrators can log in."

# provider error code -> message shown on the login form
LOGIN_ERRORS = {
    "invalid-credential": "Invalid email or password. Please try again.",
    "user-not-found": "Admin account not found. Please contact system administrator.",
}


class GateState(str, Enum):
    UNKNOWN = "unknown"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED_NON_ADMIN = "authenticated_non_admin"
    AUTHENTICATED_ADMIN = "authenticated_admin"


class AuthSession(Protocol):
    current_user: Identity | None

    def on_auth_state_changed(self, listener): ...

    def sign_out(self) -> None: ...

    def sign_in_with_email_and_password(self, email: str, password: str) -> Identity: ...


def _same_address(a: str | None, b: str) -> bool:
    return a is not None and a == b


class AccessGate:
    """
    Decides whether the admin dashboard may render for the current session.

    Advisory only: the backend applies the same check to every read of the
    enrollments collection.
    """

    def __init__(self, session: AuthSession, authorized_email: str | None = None):
        self.session = session
        self.authorized_email = authorized_email or settings.ADMIN_EMAIL
        self.state = GateState.UNKNOWN
        self._unsubscribe = None

    def start(self) -> GateState:
        if self._unsubscribe is None:
            self._unsubscribe = self.session.on_auth_state_changed(self.on_identity_change)
        return self.state

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def on_identity_change(self, identity: Identity | None) -> None:
        if identity is None:
            self.state = GateState.UNAUTHENTICATED
        elif _same_address(identity.email, self.authorized_email):
            self.state = GateState.AUTHENTICATED_ADMIN
        else:
            self.state = GateState.AUTHENTICATED_NON_ADMIN
            logger.warning("non-admin identity %s on admin route; signing out", identity.uid)
            # sign_out notifies listeners again, landing us in UNAUTHENTICATED
            try:
                self.session.sign_out()
            except Exception:  # noqa: BLE001
                logger.exception("forced sign-out failed; staying locked out")

    @property
    def can_render_dashboard(self) -> bool:
        return self.state is GateState.AUTHENTICATED_ADMIN

    def recheck(self) -> GateState:
        """Re-evaluate against the session's current user (dashboard mount)."""
        self.on_identity_change(self.session.current_user)
        return self.state

    def login(self, email: str, password: str) -> str | None:
        """Returns an error message, or None once signed in."""
        if not _same_address(email, self.authorized_email):
            return ACCESS_DENIED
        try:
            self.session.sign_in_with_email_and_password(email, password)
        except Exception as e:  # noqa: BLE001
            logger.warning("login error: %s", e)
            code = getattr(e, "code", None)
            return LOGIN_ERRORS.get(code) or str(e) or "Failed to login. Please check your credentials."
        return None

    def logout(self) -> str:
        """Sign out and return the route to navigate to, whatever the provider says."""
        try:
            self.session.sign_out()
        except Exception:  # noqa: BLE001
            logger.exception("logout error")
        return PUBLIC_ROUTE
