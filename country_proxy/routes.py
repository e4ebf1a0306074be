"""Proxy endpoints: country data behind API keys, plus key self-service"""
from typing import Optional
from urllib.parse import quote
import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.core.dependencies import read_payload, validate_payload
from app.core.exceptions import NotFound, ValidationFailed
from app.core.identity import Identity
from app.core.responses import redirect, success_response, wants_json
from app.core.sessions import SessionContext, SessionStore
from app.schemas.auth import LoginRequest, RegisterRequest, UserPublic
from country_proxy.accounts import AccountService, ApiKeyService
from country_proxy.config import proxy_settings
from country_proxy.database import get_db
from country_proxy.dependencies import (
    get_api_key_service,
    get_session_context,
    get_session_store,
    require_account,
    require_admin,
    require_api_key,
)
from country_proxy.models import ProxyUser
from country_proxy.upstream import RestCountriesClient, get_rest_countries

logger = logging.getLogger(__name__)

api_router = APIRouter(prefix="/api/v3.1", tags=["countries"], dependencies=[Depends(require_api_key)])
account_router = APIRouter(tags=["accounts"])


# =============================================================================
# COUNTRY DATA
# =============================================================================

@api_router.get("/all")
async def list_countries(upstream: RestCountriesClient = Depends(get_rest_countries)):
    """All countries as {name, flag}, sorted by name"""
    return success_response(await upstream.list_all())


@api_router.get("/{path:path}")
async def country_lookup(path: str, upstream: RestCountriesClient = Depends(get_rest_countries)):
    """
    Forward any restcountries path (``name/japan``, ``alpha/jp``) and return
    name, capital, flags, languages and currencies of the first match
    """
    return success_response(await upstream.lookup(path))


# =============================================================================
# ACCOUNTS
# =============================================================================

@account_router.get("/register")
def register_form():
    return success_response({"form": "register", "fields": ["name", "surname", "email", "password"]})


@account_router.post("/register")
async def register(request: Request, db: Session = Depends(get_db)):
    """Create an account; browsers are sent on to the login form"""
    payload = validate_payload(RegisterRequest, await read_payload(request))
    user = AccountService(db).register(payload.name, payload.surname, payload.email, payload.password)

    if wants_json(request):
        return success_response({"user": UserPublic(**user.public_fields())}, status_code=status.HTTP_201_CREATED)
    return redirect("/login")


@account_router.get("/login")
def login_form():
    return success_response({"form": "login", "fields": ["email", "password"]})


@account_router.post("/login")
async def login(
    request: Request,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
    previous: Optional[SessionContext] = Depends(get_session_context),
):
    payload = validate_payload(LoginRequest, await read_payload(request))
    service = AccountService(db)
    user = service.authenticate(payload.email, payload.password)

    if previous is not None:
        store.destroy(previous.session_id)
    context = store.create(service.identity_for(user))

    if wants_json(request):
        response = success_response({"user": UserPublic(**user.public_fields()), "is_admin": user.is_admin})
    else:
        response = redirect("/home")
    response.set_cookie(
        key=proxy_settings.SESSION_COOKIE_NAME,
        value=store.sign_cookie(context),
        max_age=proxy_settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        samesite="lax",
    )
    return response


@account_router.get("/home")
def home(identity: Identity = Depends(require_account)):
    """Signed-in landing data; existing keys are never shown again"""
    return success_response({"user": identity.public_fields()})


@account_router.post("/generate-api-key")
def generate_api_key(
    identity: Identity = Depends(require_account),
    keys: ApiKeyService = Depends(get_api_key_service),
):
    """Issue a new key; this response is the only place its value appears"""
    key = keys.generate(identity.id)
    return success_response(
        {
            "message": "API key generated successfully!",
            "api_key": key.api_key,
            "user": identity.public_fields(),
        },
        status_code=status.HTTP_201_CREATED,
    )


@account_router.get("/admin")
def admin_dashboard(
    admin: ProxyUser = Depends(require_admin),
    db: Session = Depends(get_db),
    keys: ApiKeyService = Depends(get_api_key_service),
):
    return success_response({
        "user": admin.public_fields(),
        "users": AccountService(db).list_users(),
        "apiKeys": keys.list_keys(),
    })


@account_router.post("/admin/deactivate-key")
async def deactivate_key(
    request: Request,
    admin: ProxyUser = Depends(require_admin),
    keys: ApiKeyService = Depends(get_api_key_service),
):
    """Deactivate the key named by ``keyId``; browsers return to the dashboard"""
    payload = await read_payload(request)
    try:
        key_id = int(payload.get("keyId"))
    except (TypeError, ValueError):
        raise ValidationFailed("keyId must be an integer")

    if wants_json(request):
        key = keys.deactivate(key_id)
        return success_response({"message": "API key deactivated successfully", "id": key.id, "is_active": key.is_active})

    try:
        keys.deactivate(key_id)
    except NotFound as e:
        return redirect(f"/admin?success=false&message={quote(e.message)}")
    return redirect(f"/admin?success=true&message={quote('API key deactivated successfully')}")


@account_router.api_route("/logout", methods=["GET", "POST"])
def logout(
    request: Request,
    session: Optional[SessionContext] = Depends(get_session_context),
    store: SessionStore = Depends(get_session_store),
):
    if session is not None:
        store.destroy(session.session_id)

    if wants_json(request):
        response = success_response({"message": "Logged out"})
    else:
        response = redirect("/login")
    response.delete_cookie(proxy_settings.SESSION_COOKIE_NAME)
    return response
