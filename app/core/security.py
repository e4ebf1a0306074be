"""Password hashing and bearer token signing"""
from datetime import timedelta
from typing import Any, Dict, Optional
import logging

import bcrypt
from jose import jwt, JWTError, ExpiredSignatureError

from app.config import settings
from app.core.exceptions import InvalidToken
from app.core.identity import Identity, Provenance
from app.utils.time_utils import utc_now

logger = logging.getLogger(__name__)

BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    # bcrypt only reads the first 72 bytes and newer releases reject longer input
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def get_password_hash(password: str) -> str:
    """Hash a plain-text password with bcrypt"""
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Check a plain-text password against a stored bcrypt hash"""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


class TokenIssuer:
    """
    Signs and verifies compact identity tokens (JWT, HS256 by default).

    Verification is stateless: there is no revocation list, so a leaked
    token stays valid until it expires.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 1440):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self.secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def sign(self, identity: Identity, expires_delta: Optional[timedelta] = None) -> str:
        """Create a token embedding the identity's public fields"""
        issued_at = utc_now()
        expire = issued_at + (expires_delta if expires_delta is not None else timedelta(minutes=self.expire_minutes))

        payload: Dict[str, Any] = {
            **identity.public_fields(),
            "sub": str(identity.id),
            "iat": issued_at,
            "exp": expire,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Identity:
        """
        Decode and validate a token

        Raises:
            InvalidToken on expiry, bad signature or malformed payload
        """
        if not token:
            raise InvalidToken("No token provided")

        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise InvalidToken("Token expired")
        except JWTError as e:
            logger.debug(f"JWT verification failed: {e}")
            raise InvalidToken("Invalid token")

        try:
            return Identity.from_claims(payload, Provenance.token)
        except (KeyError, TypeError, ValueError):
            raise InvalidToken("Malformed token payload")


def build_token_issuer() -> TokenIssuer:
    """TokenIssuer configured from application settings"""
    return TokenIssuer(
        secret=settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
        expire_minutes=settings.JWT_EXPIRE_MINUTES,
    )
