"""
Session store and authentication gateway tests
"""
import asyncio
from datetime import timedelta

import pytest

from app.core.auth import AuthGateway, RequestCredentials
from app.core.exceptions import InvalidToken, Unauthenticated
from app.core.identity import Identity, Provenance
from app.core.sessions import SessionContext, SessionStore
from app.utils.time_utils import utc_now


@pytest.fixture
def alice() -> Identity:
    return Identity(id=1, name="Alice", surname="Walker", email="alice@example.com")


@pytest.fixture
def bob() -> Identity:
    return Identity(id=2, name="Bob", surname="Stone", email="bob@example.com")


@pytest.fixture
def gateway(token_issuer) -> AuthGateway:
    return AuthGateway(token_issuer)


# =============================================================================
# SESSION STORE
# =============================================================================

class TestSessionStore:

    def test_create_then_load_cookie(self, session_store, alice):
        context = session_store.create(alice)
        cookie = session_store.sign_cookie(context)

        loaded = session_store.load_cookie(cookie)
        assert loaded is context
        assert loaded.is_authenticated
        assert loaded.identity().id == alice.id
        assert loaded.identity().provenance is Provenance.session

    def test_cookie_holds_no_identity_data(self, session_store, alice):
        cookie = session_store.sign_cookie(session_store.create(alice))
        assert "alice@example.com" not in cookie
        assert "Walker" not in cookie

    def test_tampered_cookie_ignored(self, session_store, alice):
        cookie = session_store.sign_cookie(session_store.create(alice))
        assert session_store.load_cookie(cookie + "x") is None
        assert session_store.load_cookie("garbage") is None
        assert session_store.load_cookie(None) is None

    def test_cookie_from_other_secret_ignored(self, session_store, alice):
        other = SessionStore(secret="other-secret")
        cookie = other.sign_cookie(other.create(alice))
        assert session_store.load_cookie(cookie) is None

    def test_destroy_ends_session(self, session_store, alice):
        context = session_store.create(alice)
        cookie = session_store.sign_cookie(context)

        assert session_store.destroy(context.session_id)
        assert session_store.load_cookie(cookie) is None
        assert not session_store.destroy(context.session_id)

    def test_expired_session_dropped_on_read(self, session_store, alice):
        context = session_store.create(alice)
        context.expires_at = utc_now() - timedelta(seconds=1)

        assert session_store.get(context.session_id) is None
        assert len(session_store) == 0

    def test_purge_expired(self, session_store, alice, bob):
        stale = session_store.create(alice)
        session_store.create(bob)
        stale.expires_at = utc_now() - timedelta(minutes=1)

        assert session_store.purge_expired() == 1
        assert len(session_store) == 1

    def test_each_login_gets_new_session_id(self, session_store, alice):
        first = session_store.create(alice)
        second = session_store.create(alice)
        assert first.session_id != second.session_id


# =============================================================================
# GATEWAY
# =============================================================================

class TestAuthGateway:

    def test_session_identity(self, gateway, session_store, alice):
        credentials = RequestCredentials(session=session_store.create(alice))

        identity = gateway.authenticate(credentials)
        assert identity.id == alice.id
        assert identity.provenance is Provenance.session

    def test_bearer_token_identity(self, gateway, token_issuer, alice):
        token = token_issuer.sign(alice)
        credentials = RequestCredentials(authorization=f"Bearer {token}")

        identity = gateway.authenticate(credentials)
        assert identity.id == alice.id
        assert identity.provenance is Provenance.token

    def test_session_and_token_give_same_id(self, gateway, session_store, token_issuer, alice):
        from_session = gateway.authenticate(RequestCredentials(session=session_store.create(alice)))
        from_token = gateway.authenticate(RequestCredentials(authorization=f"Bearer {token_issuer.sign(alice)}"))
        assert from_session.id == from_token.id

    def test_session_wins_over_token(self, gateway, session_store, token_issuer, alice, bob):
        credentials = RequestCredentials(
            session=session_store.create(alice),
            authorization=f"Bearer {token_issuer.sign(bob)}",
        )
        assert gateway.authenticate(credentials).id == alice.id

    def test_session_wins_even_with_bad_token(self, gateway, session_store, alice):
        credentials = RequestCredentials(
            session=session_store.create(alice),
            authorization="Bearer not-a-token",
        )
        assert gateway.authenticate(credentials).id == alice.id

    def test_unauthenticated_session_falls_through_to_token(self, gateway, token_issuer, bob):
        anonymous = SessionContext(session_id="anon", expires_at=utc_now() + timedelta(hours=1))
        credentials = RequestCredentials(session=anonymous, authorization=f"Bearer {token_issuer.sign(bob)}")
        assert gateway.authenticate(credentials).id == bob.id

    def test_no_credentials(self, gateway):
        with pytest.raises(Unauthenticated) as exc:
            gateway.authenticate(RequestCredentials())
        assert not isinstance(exc.value, InvalidToken)

    def test_invalid_token(self, gateway):
        with pytest.raises(InvalidToken):
            gateway.authenticate(RequestCredentials(authorization="Bearer nope"))

    def test_non_bearer_header(self, gateway):
        with pytest.raises(InvalidToken) as exc:
            gateway.authenticate(RequestCredentials(authorization="Basic dXNlcjpwYXNz"))
        assert exc.value.message == "Malformed Authorization header"

    def test_session_only_mode_rejects_token(self, gateway, token_issuer, alice):
        credentials = RequestCredentials(authorization=f"Bearer {token_issuer.sign(alice)}")
        with pytest.raises(Unauthenticated):
            gateway.authenticate_session(credentials)

    def test_try_authenticate_returns_none(self, gateway):
        assert gateway.try_authenticate(RequestCredentials()) is None
        assert gateway.try_authenticate(RequestCredentials(authorization="Bearer nope")) is None


def test_scheduled_purge_uses_process_store(alice):
    from app.core.sessions import session_store
    from app.scheduler import purge_expired_sessions

    stale = session_store.create(alice)
    stale.expires_at = utc_now() - timedelta(seconds=1)

    asyncio.run(purge_expired_sessions())
    assert session_store.get(stale.session_id) is None
