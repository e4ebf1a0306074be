"""Registration, login and logout endpoints"""
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.config import settings
from app.database import get_db
from app.core.dependencies import (
    get_session_context,
    get_session_store,
    read_payload,
    validate_payload,
)
from app.core.identity import Identity, Provenance
from app.core.rate_limit import limiter
from app.core.responses import is_api_client, redirect, success_response, wants_json
from app.core.security import build_token_issuer
from app.core.sessions import SessionContext, SessionStore
from app.services.auth_service import AuthService
from app.schemas.auth import AuthResult, LoginRequest, RegisterRequest, UserPublic

logger = logging.getLogger(__name__)

router = APIRouter(tags=["authentication"])


def open_session(store: SessionStore, previous: Optional[SessionContext], identity: Identity) -> SessionContext:
    """Replace any session the browser already holds with a fresh one"""
    if previous is not None:
        store.destroy(previous.session_id)
    return store.create(identity)


def attach_session_cookie(response: Response, store: SessionStore, context: SessionContext) -> Response:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=store.sign_cookie(context),
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        samesite="lax",
    )
    return response


@router.get("/register")
def register_form():
    """Fields expected by POST /register"""
    return success_response({"form": "register", "fields": ["name", "surname", "email", "password"]})


@router.post("/register")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def register(
    request: Request,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
    previous: Optional[SessionContext] = Depends(get_session_context),
):
    """
    Create an account and sign the browser in

    - **name**, **surname**, **email**, **password** as JSON or form data
    - Duplicate email returns 400
    """
    payload = validate_payload(RegisterRequest, await read_payload(request))

    service = AuthService(db)
    user = service.register(
        name=payload.name,
        surname=payload.surname,
        email=payload.email,
        password=payload.password,
    )

    context = open_session(store, previous, service.identity_for(user))
    result = AuthResult(message="Registered", user=UserPublic(**user.public_fields()))

    if wants_json(request):
        response = success_response(result, status_code=status.HTTP_201_CREATED)
    else:
        response = redirect("/")
    return attach_session_cookie(response, store, context)


@router.get("/login")
def login_form():
    """Fields expected by POST /login"""
    return success_response({"form": "login", "fields": ["email", "password"]})


@router.post("/login")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
    previous: Optional[SessionContext] = Depends(get_session_context),
):
    """
    Password login

    - Requests carrying the `X-API-Client` header receive a bearer token
      (valid 24 hours) and no session
    - All other requests get a server-side session cookie
    """
    payload = validate_payload(LoginRequest, await read_payload(request))

    service = AuthService(db)
    user = service.authenticate(payload.email, payload.password)
    public_user = UserPublic(**user.public_fields())

    if is_api_client(request):
        token = build_token_issuer().sign(service.identity_for(user, Provenance.token))
        logger.info(f"Issued API token for user {user.id}")
        return success_response(AuthResult(message="Authenticated", user=public_user, token=token))

    context = open_session(store, previous, service.identity_for(user))
    if wants_json(request):
        response = success_response(AuthResult(message="Authenticated", user=public_user))
    else:
        response = redirect("/")
    return attach_session_cookie(response, store, context)


@router.api_route("/logout", methods=["GET", "POST"])
def logout(
    request: Request,
    session: Optional[SessionContext] = Depends(get_session_context),
    store: SessionStore = Depends(get_session_store),
):
    """Destroy the browser session"""
    if session is not None:
        store.destroy(session.session_id)

    if wants_json(request):
        response = success_response({"message": "Logged out"})
    else:
        response = redirect("/login")
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response
