"""FastAPI dependencies for authentication and authorization"""
from typing import Any, Dict, Optional

from fastapi import Depends, Request
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from app.core.auth import AuthGateway, RequestCredentials
from app.core.exceptions import ValidationFailed
from app.core.identity import Identity
from app.core.ownership import OwnershipGuard, ResourceKind
from app.core.security import build_token_issuer
from app.core.sessions import SessionContext, SessionStore, session_store
from app.config import settings
from app.database import get_db


def get_session_store(request: Request) -> SessionStore:
    return getattr(request.app.state, "session_store", session_store)


def get_session_context(
    request: Request,
    store: SessionStore = Depends(get_session_store),
) -> Optional[SessionContext]:
    """Live session referenced by the request cookie, if any"""
    return store.load_cookie(request.cookies.get(settings.SESSION_COOKIE_NAME))


def get_auth_gateway() -> AuthGateway:
    return AuthGateway(build_token_issuer())


def get_credentials(
    request: Request,
    session: Optional[SessionContext] = Depends(get_session_context),
) -> RequestCredentials:
    return RequestCredentials(
        session=session,
        authorization=request.headers.get("authorization"),
    )


def require_identity(
    credentials: RequestCredentials = Depends(get_credentials),
    gateway: AuthGateway = Depends(get_auth_gateway),
) -> Identity:
    """Session or bearer token (mutation endpoints)"""
    return gateway.authenticate(credentials)


def require_session(
    credentials: RequestCredentials = Depends(get_credentials),
    gateway: AuthGateway = Depends(get_auth_gateway),
) -> Identity:
    """Browser session only (form pages)"""
    return gateway.authenticate_session(credentials)


def get_optional_identity(
    credentials: RequestCredentials = Depends(get_credentials),
    gateway: AuthGateway = Depends(get_auth_gateway),
) -> Optional[Identity]:
    """Identity if one can be established, otherwise None"""
    return gateway.try_authenticate(credentials)


def _owner_dependency(kind: ResourceKind, id_param: str, identity_dependency):
    def dependency(
        request: Request,
        identity: Identity = Depends(identity_dependency),
        db: Session = Depends(get_db),
    ) -> Identity:
        raw_id = request.path_params.get(id_param)
        try:
            resource_id = int(raw_id)
        except (TypeError, ValueError):
            raise ValidationFailed(f"Invalid {kind.value} id")

        OwnershipGuard(db).authorize(kind, resource_id, identity)
        return identity

    return dependency


def require_owner(kind: ResourceKind, id_param: str):
    """
    Build a dependency that lets the request through only for the owner of
    the resource named by path parameter ``id_param`` (session or token).
    """
    return _owner_dependency(kind, id_param, require_identity)


def require_session_owner(kind: ResourceKind, id_param: str):
    """Ownership check for session-only form pages"""
    return _owner_dependency(kind, id_param, require_session)


async def read_payload(request: Request) -> Dict[str, Any]:
    """Request body as a dict, from JSON or an HTML form"""
    content_type = request.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            body = await request.json()
        except ValueError:
            raise ValidationFailed("Malformed JSON body")
        if not isinstance(body, dict):
            raise ValidationFailed("JSON body must be an object")
        return body

    if "form" in content_type:
        form = await request.form()
        return {key: value for key, value in form.items() if key != "_method"}

    return {}


def validate_payload(schema: type[BaseModel], payload: Dict[str, Any]) -> BaseModel:
    """Validate a body dict, turning pydantic errors into a 400"""
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'body'}: {err['msg']}"
            for err in e.errors()
        )
        raise ValidationFailed(f"Invalid input: {details}")
