"""
Password hashing and token issuer tests
"""
from datetime import timedelta

import pytest
from jose import jwt

from app.core.exceptions import InvalidToken
from app.core.identity import Identity, Provenance
from app.core.security import TokenIssuer, get_password_hash, verify_password


@pytest.fixture
def alice() -> Identity:
    return Identity(id=7, name="Alice", surname="Walker", email="alice@example.com")


# =============================================================================
# PASSWORDS
# =============================================================================

class TestPasswordHashing:

    def test_hash_is_not_plaintext_and_verifies(self):
        hashed = get_password_hash("correct horse")
        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)

    def test_wrong_password_rejected(self):
        hashed = get_password_hash("correct horse")
        assert not verify_password("battery staple", hashed)

    def test_same_password_hashes_differently(self):
        assert get_password_hash("samesame") != get_password_hash("samesame")

    def test_non_bcrypt_hash_is_a_mismatch(self):
        assert not verify_password("anything", "plain-text-not-a-hash")
        assert not verify_password("anything", "")

    def test_long_password_is_accepted(self):
        long_password = "x" * 100
        hashed = get_password_hash(long_password)
        assert verify_password(long_password, hashed)


# =============================================================================
# TOKENS
# =============================================================================

class TestTokenIssuer:

    def test_round_trip_returns_same_identity(self, token_issuer, alice):
        token = token_issuer.sign(alice)
        identity = token_issuer.verify(token)

        assert identity.public_fields() == alice.public_fields()
        assert identity.provenance is Provenance.token

    def test_token_embeds_public_fields_and_expiry(self, token_issuer, alice):
        claims = jwt.get_unverified_claims(token_issuer.sign(alice))

        assert claims["id"] == 7
        assert claims["email"] == "alice@example.com"
        assert claims["sub"] == "7"
        assert claims["exp"] - claims["iat"] == 24 * 60 * 60
        assert "password" not in claims
        assert "password_hash" not in claims

    def test_expired_token_rejected(self, token_issuer, alice):
        token = token_issuer.sign(alice, expires_delta=timedelta(seconds=-5))

        with pytest.raises(InvalidToken) as exc:
            token_issuer.verify(token)
        assert exc.value.message == "Token expired"
        assert exc.value.status_code == 401

    def test_token_from_other_secret_rejected(self, alice):
        foreign = TokenIssuer(secret="someone-else").sign(alice)
        with pytest.raises(InvalidToken):
            TokenIssuer(secret="test-jwt-secret").verify(foreign)

    def test_tampered_token_rejected(self, token_issuer, alice):
        token = token_issuer.sign(alice)
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])

        with pytest.raises(InvalidToken):
            token_issuer.verify(tampered)

    def test_garbage_and_empty_tokens_rejected(self, token_issuer):
        with pytest.raises(InvalidToken):
            token_issuer.verify("not-a-jwt")
        with pytest.raises(InvalidToken):
            token_issuer.verify("")

    def test_payload_without_identity_fields_rejected(self, token_issuer):
        token = jwt.encode({"sub": "1"}, "test-jwt-secret", algorithm="HS256")

        with pytest.raises(InvalidToken) as exc:
            token_issuer.verify(token)
        assert exc.value.message == "Malformed token payload"

    def test_empty_secret_refused(self):
        with pytest.raises(ValueError):
            TokenIssuer(secret="")
