"""
Authentication gateway

Decides, per request, whether an identity is established. A live
authenticated session always wins; otherwise a bearer token is verified.
The gateway is a pure decision: it never opens sessions and never decides
how a rejection is rendered.
"""
from dataclasses import dataclass
from typing import Optional

from app.core.exceptions import Unauthenticated, InvalidToken
from app.core.identity import Identity
from app.core.security import TokenIssuer
from app.core.sessions import SessionContext

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class RequestCredentials:
    """Credentials presented by one request"""
    session: Optional[SessionContext] = None
    authorization: Optional[str] = None

    @property
    def bearer_token(self) -> Optional[str]:
        """Token from an ``Authorization: Bearer <token>`` header, if well formed"""
        if not self.authorization or not self.authorization.startswith(BEARER_PREFIX):
            return None
        token = self.authorization[len(BEARER_PREFIX):].strip()
        return token or None


class AuthGateway:
    """Unifies session and bearer-token credentials into one Identity"""

    def __init__(self, token_issuer: TokenIssuer):
        self.token_issuer = token_issuer

    def authenticate(self, credentials: RequestCredentials) -> Identity:
        """
        Establish the request identity (session first, then token)

        Raises:
            Unauthenticated if no usable credential is present
            InvalidToken if a bearer token is present but fails verification
        """
        session_identity = self.session_identity(credentials)
        if session_identity is not None:
            return session_identity

        token = credentials.bearer_token
        if token is not None:
            return self.token_issuer.verify(token)

        if credentials.authorization:
            raise InvalidToken("Malformed Authorization header")
        raise Unauthenticated()

    def authenticate_session(self, credentials: RequestCredentials) -> Identity:
        """Strict mode: only an authenticated browser session is accepted"""
        session_identity = self.session_identity(credentials)
        if session_identity is None:
            raise Unauthenticated()
        return session_identity

    def try_authenticate(self, credentials: RequestCredentials) -> Optional[Identity]:
        """Permissive mode for pages that only annotate output"""
        try:
            return self.authenticate(credentials)
        except Unauthenticated:
            return None

    @staticmethod
    def session_identity(credentials: RequestCredentials) -> Optional[Identity]:
        if credentials.session is None:
            return None
        return credentials.session.identity()
