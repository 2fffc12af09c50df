from domain.models import Identity
from services.auth.gate import ACCESS_DENIED, PUBLIC_ROUTE, AccessGate, GateState

ADMIN = Identity(uid="admin@questo.com", email="admin@questo.com")
STAFF = Identity(uid="staff@questo.com", email="staff@questo.com")
ANON = Identity(uid="anon:1", is_anonymous=True)


class FakeSession:
    """Mimics the identity client's listener semantics."""

    def __init__(self, user=None, fail_sign_out=False, login_error=None):
        self.current_user = user
        self.listeners = []
        self.sign_out_calls = 0
        self.fail_sign_out = fail_sign_out
        self.login_error = login_error

    def on_auth_state_changed(self, listener):
        self.listeners.append(listener)
        listener(self.current_user)
        return lambda: self.listeners.remove(listener)

    def _notify(self, user):
        self.current_user = user
        for listener in list(self.listeners):
            listener(user)

    def sign_out(self):
        self.sign_out_calls += 1
        if self.fail_sign_out:
            raise ConnectionError("provider unreachable")
        self._notify(None)

    def sign_in_with_email_and_password(self, email, password):
        if self.login_error:
            raise self.login_error
        self._notify(Identity(uid=email, email=email))
        return self.current_user


def test_initial_state_is_unknown():
    gate = AccessGate(FakeSession(), authorized_email="admin@questo.com")
    assert gate.state is GateState.UNKNOWN
    assert not gate.can_render_dashboard


def test_no_identity_is_unauthenticated():
    gate = AccessGate(FakeSession(), authorized_email="admin@questo.com")
    assert gate.start() is GateState.UNAUTHENTICATED


def test_authorized_address_renders_dashboard():
    session = FakeSession(ADMIN)
    gate = AccessGate(session, authorized_email="admin@questo.com")
    gate.start()
    assert gate.state is GateState.AUTHENTICATED_ADMIN
    assert gate.can_render_dashboard
    assert session.sign_out_calls == 0


def test_other_identity_is_signed_out_and_never_sees_dashboard():
    session = FakeSession(STAFF)
    gate = AccessGate(session, authorized_email="admin@questo.com")
    seen = []
    session.on_auth_state_changed(lambda _: seen.append(gate.can_render_dashboard))

    gate.start()

    assert session.sign_out_calls == 1
    assert gate.state is GateState.UNAUTHENTICATED
    assert session.current_user is None
    assert not any(seen)


def test_non_admin_state_held_until_provider_confirms():
    session = FakeSession(STAFF, fail_sign_out=True)
    gate = AccessGate(session, authorized_email="admin@questo.com")
    gate.start()
    assert session.sign_out_calls == 1
    assert gate.state is GateState.AUTHENTICATED_NON_ADMIN
    assert not gate.can_render_dashboard


def test_address_must_match_exactly():
    session = FakeSession(Identity(uid="Admin@Questo.com", email="Admin@Questo.com"))
    gate = AccessGate(session, authorized_email="admin@questo.com")
    gate.start()
    assert session.sign_out_calls == 1
    assert not gate.can_render_dashboard
    assert gate.login(" admin@questo.com", "pw") == ACCESS_DENIED


def test_anonymous_session_is_not_admin():
    session = FakeSession(ANON)
    gate = AccessGate(session, authorized_email="admin@questo.com")
    gate.start()
    assert session.sign_out_calls == 1
    assert not gate.can_render_dashboard


def test_recheck_uses_current_user():
    session = FakeSession()
    gate = AccessGate(session, authorized_email="admin@questo.com")
    session.current_user = ADMIN
    assert gate.recheck() is GateState.AUTHENTICATED_ADMIN


def test_login_refuses_other_addresses_before_provider():
    session = FakeSession()
    gate = AccessGate(session, authorized_email="admin@questo.com")
    gate.start()
    assert gate.login("staff@questo.com", "pw") == ACCESS_DENIED
    assert session.current_user is None


def test_login_success_transitions_to_admin():
    session = FakeSession()
    gate = AccessGate(session, authorized_email="admin@questo.com")
    gate.start()
    assert gate.login("admin@questo.com", "pw") is None
    assert gate.state is GateState.AUTHENTICATED_ADMIN


def test_login_maps_provider_codes():
    class CodedError(Exception):
        code = "invalid-credential"

    gate = AccessGate(FakeSession(login_error=CodedError("bad")), authorized_email="admin@questo.com")
    assert gate.login("admin@questo.com", "nope") == "Invalid email or password. Please try again."


def test_logout_always_routes_to_public_form():
    session = FakeSession(ADMIN, fail_sign_out=True)
    gate = AccessGate(session, authorized_email="admin@questo.com")
    gate.start()
    assert gate.logout() == PUBLIC_ROUTE
    assert session.sign_out_calls == 1


def test_stop_unsubscribes():
    session = FakeSession()
    gate = AccessGate(session, authorized_email="admin@questo.com")
    gate.start()
    gate.stop()
    assert session.listeners == []
