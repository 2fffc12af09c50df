"""Per-browser-session objects shared by the Streamlit pages."""

from __future__ import annotations

import logging

import httpx
import streamlit as st

from services.auth.gate import AccessGate
from services.clients.identity import AuthError, IdentityClient
from services.clients.stores import DocumentStoreClient, ObjectStoreClient
from services.enrollment.draft import EnrollmentDraft

logger = logging.getLogger(__name__)


def get_identity() -> IdentityClient:
    if "identity" not in st.session_state:
        st.session_state.identity = IdentityClient()
    return st.session_state.identity


def ensure_anonymous_session(identity: IdentityClient) -> None:
    """The public form writes under an anonymous session established on load."""
    if identity.current_user is not None:
        return
    try:
        identity.sign_in_anonymously()
    except (AuthError, httpx.HTTPError) as e:
        logger.error("error signing in anonymously: %s", e)


def store_clients(identity: IdentityClient) -> tuple[ObjectStoreClient, DocumentStoreClient]:
    return ObjectStoreClient(identity.auth_headers), DocumentStoreClient(identity.auth_headers)


def get_draft() -> EnrollmentDraft:
    if "draft" not in st.session_state:
        st.session_state.draft = EnrollmentDraft()
        st.session_state.form_nonce = 0
    return st.session_state.draft


def widget_key(name: str) -> str:
    # bumping the nonce after a reset gives every widget a fresh default
    return f"{name}__{st.session_state.get('form_nonce', 0)}"


def bump_form_nonce() -> None:
    st.session_state.form_nonce = st.session_state.get("form_nonce", 0) + 1


def get_gate(identity: IdentityClient) -> AccessGate:
    if "gate" not in st.session_state:
        gate = AccessGate(identity)
        gate.start()
        st.session_state.gate = gate
    return st.session_state.gate


def release_gate() -> None:
    """Leaving the admin route unmounts the gate so it stops reacting to sign-ins."""
    gate = st.session_state.pop("gate", None)
    if gate is not None:
        gate.stop()
    st.session_state.pop("listing", None)


def take_banner(state) -> tuple[str, str] | None:
    """
    The one status message to show above the form, as ``(kind, text)``.

    A success flash is shown once and then dropped; a submit error stays
    until the next submit replaces or clears it.
    """
    flash = state.pop("flash", None)
    if flash:
        return "success", flash
    error = state.get("submit_error")
    if error:
        return "error", error
    return None
