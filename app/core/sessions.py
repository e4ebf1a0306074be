"""
Server-held browser sessions

The cookie carries only a signed, opaque session id. Identity data lives in
``SessionStore`` on the server and is dropped on logout or expiry.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from threading import Lock
from typing import Dict, Optional
import logging
import secrets

from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

from app.config import settings
from app.core.identity import Identity, Provenance
from app.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """Identity slot for one browser session"""
    session_id: str
    expires_at: datetime
    user: Optional[Identity] = None
    is_authenticated: bool = False
    created_at: datetime = field(default_factory=utc_now)

    @property
    def is_expired(self) -> bool:
        return utc_now() >= self.expires_at

    def identity(self) -> Optional[Identity]:
        """Embedded identity, tagged as session-derived, if authenticated"""
        if not self.is_authenticated or self.user is None:
            return None
        return self.user.with_provenance(Provenance.session)


class SessionStore:
    """In-process session registry keyed by session id"""

    def __init__(self, secret: str, max_age_seconds: int = 86400):
        self.max_age_seconds = max_age_seconds
        self._serializer = URLSafeTimedSerializer(secret, salt="travel-tales-session")
        self._sessions: Dict[str, SessionContext] = {}
        self._lock = Lock()

    def create(self, identity: Identity) -> SessionContext:
        """Open a new authenticated session for ``identity``"""
        context = SessionContext(
            session_id=secrets.token_urlsafe(32),
            expires_at=utc_now() + timedelta(seconds=self.max_age_seconds),
            user=identity.with_provenance(Provenance.session),
            is_authenticated=True,
        )
        with self._lock:
            self._sessions[context.session_id] = context
        logger.info(f"Session opened for user {identity.id}")
        return context

    def get(self, session_id: str) -> Optional[SessionContext]:
        with self._lock:
            context = self._sessions.get(session_id)
            if context is not None and context.is_expired:
                del self._sessions[session_id]
                return None
            return context

    def destroy(self, session_id: str) -> bool:
        """Drop a session; returns False if it did not exist"""
        with self._lock:
            context = self._sessions.pop(session_id, None)
        if context is not None and context.user is not None:
            logger.info(f"Session closed for user {context.user.id}")
        return context is not None

    def purge_expired(self) -> int:
        """Remove expired sessions, returning how many were dropped"""
        with self._lock:
            expired = [sid for sid, ctx in self._sessions.items() if ctx.is_expired]
            for sid in expired:
                del self._sessions[sid]
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)

    # Cookie encoding

    def sign_cookie(self, context: SessionContext) -> str:
        return self._serializer.dumps(context.session_id)

    def load_cookie(self, cookie_value: Optional[str]) -> Optional[SessionContext]:
        """Resolve a cookie value to a live session, or None if absent, tampered or expired"""
        if not cookie_value:
            return None
        try:
            session_id = self._serializer.loads(cookie_value, max_age=self.max_age_seconds)
        except SignatureExpired:
            return None
        except BadSignature:
            logger.warning("Rejected session cookie with bad signature")
            return None
        return self.get(session_id)


# Process-wide store used by the web app
session_store = SessionStore(
    secret=settings.SESSION_SECRET_KEY,
    max_age_seconds=settings.SESSION_MAX_AGE_SECONDS,
)
