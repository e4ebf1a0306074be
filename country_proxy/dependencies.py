"""FastAPI dependencies for the proxy: API keys, account sessions, admin access"""
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.exceptions import NotOwner, Unauthenticated
from app.core.identity import Identity
from app.core.sessions import SessionContext, SessionStore
from country_proxy.accounts import AccountService, ApiKeyService
from country_proxy.config import proxy_settings
from country_proxy.database import get_db
from country_proxy.models import ProxyUser

MISSING_KEY_MESSAGE = 'API key is required. Add an Authorization header with "Bearer YOUR_API_KEY"'

# Process-wide store for proxy account sessions
proxy_session_store = SessionStore(
    secret=proxy_settings.SESSION_SECRET_KEY,
    max_age_seconds=proxy_settings.SESSION_MAX_AGE_SECONDS,
)


def get_api_key_service(db: Session = Depends(get_db)) -> ApiKeyService:
    return ApiKeyService(db, demo_key=proxy_settings.DEMO_API_KEY)


def require_api_key(
    request: Request,
    keys: ApiKeyService = Depends(get_api_key_service),
) -> str:
    """Bearer API key check guarding every /api/ route"""
    header = request.headers.get("authorization", "")
    scheme, _, raw_key = header.partition(" ")
    if scheme != "Bearer" or not raw_key.strip():
        raise Unauthenticated(MISSING_KEY_MESSAGE)

    raw_key = raw_key.strip()
    if not keys.is_valid(raw_key):
        raise Unauthenticated("Invalid or inactive API key")
    return raw_key


def get_session_store(request: Request) -> SessionStore:
    return getattr(request.app.state, "session_store", proxy_session_store)


def get_session_context(
    request: Request,
    store: SessionStore = Depends(get_session_store),
) -> Optional[SessionContext]:
    return store.load_cookie(request.cookies.get(proxy_settings.SESSION_COOKIE_NAME))


def require_account(session: Optional[SessionContext] = Depends(get_session_context)) -> Identity:
    identity = session.identity() if session is not None else None
    if identity is None:
        raise Unauthenticated()
    return identity


def require_admin(
    identity: Identity = Depends(require_account),
    db: Session = Depends(get_db),
) -> ProxyUser:
    """Admin flag is read from the database, not the session"""
    user = AccountService(db).get(identity.id)
    if user is None or not user.is_admin:
        raise NotOwner("Admin access required")
    return user
