"""
Pytest configuration and shared fixtures.

Environment is set before the app is imported so the settings object picks
up test values (in-memory database, cheap bcrypt, no rate limiting).
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["SESSION_SECRET_KEY"] = "test-session-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["COUNTRY_PROXY_DATABASE_URL"] = "sqlite://"
os.environ["COUNTRY_PROXY_LOG_LEVEL"] = "WARNING"

from datetime import timedelta

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.identity import Identity, Provenance
from app.core.security import TokenIssuer
from app.core.sessions import SessionStore
from app.database import build_engine, get_db, init_db
from app.main import app
from app.models.post import Post, Comment
from app.models.user import User
from app.services.auth_service import AuthService
from app.services.country_service import CountryService, get_country_service
from app.utils.time_utils import utc_now

TEST_PASSWORD = "secret-pass-123"

COUNTRY_FIXTURES = {
    "Japan": {
        "name": "Japan",
        "capital": "Tokyo",
        "flags": "https://flags.example/jp.png",
        "currencies": {"JPY": {"name": "Japanese yen", "symbol": "¥"}},
        "languages": {"jpn": "Japanese"},
    },
    "Peru": {
        "name": "Peru",
        "capital": "Lima",
        "flags": "https://flags.example/pe.png",
        "currencies": {"PEN": {"name": "Peruvian sol"}},
        "languages": {"spa": "Spanish", "que": "Quechua"},
    },
}


def country_api_handler(request: httpx.Request) -> httpx.Response:
    """Stand-in for the country microservice"""
    if request.headers.get("authorization") != "Bearer test-country-key":
        return httpx.Response(401, json={"success": False, "error": "API key is required"})

    path = request.url.path
    if path.endswith("/all"):
        data = [{"name": name, "flag": c["flags"]} for name, c in sorted(COUNTRY_FIXTURES.items())]
        return httpx.Response(200, json={"success": True, "data": data})

    if "/name/" in path:
        name = path.rsplit("/name/", 1)[1]
        if name == "Atlantis":
            return httpx.Response(500, text="upstream exploded")
        country = COUNTRY_FIXTURES.get(name)
        if country is None:
            return httpx.Response(404, json={"success": False, "error": "Country not found"})
        return httpx.Response(200, json={"success": True, "data": country})

    return httpx.Response(404, json={"success": False, "error": "Not found"})


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def token_issuer() -> TokenIssuer:
    return TokenIssuer(secret="test-jwt-secret", algorithm="HS256", expire_minutes=1440)


@pytest.fixture
def session_store() -> SessionStore:
    return SessionStore(secret="test-session-secret", max_age_seconds=3600)


@pytest.fixture
def country_service() -> CountryService:
    return CountryService(
        base_url="http://country.test/api/v3.1",
        api_key="test-country-key",
        timeout=5,
        transport=httpx.MockTransport(country_api_handler),
    )


@pytest.fixture
def client(session_factory, session_store, country_service):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_country_service] = lambda: country_service
    previous_store = app.state.session_store
    app.state.session_store = session_store

    # No context manager: startup hooks (scheduler, file database) stay off
    yield TestClient(app)

    app.dependency_overrides.clear()
    app.state.session_store = previous_store


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(name: str = None, surname: str = "Traveller", email: str = None) -> User:
        counter["n"] += 1
        name = name or f"User{counter['n']}"
        email = email or f"{name.lower()}{counter['n']}@example.com"
        return AuthService(db).register(name=name, surname=surname, email=email, password=TEST_PASSWORD)

    return _make_user


@pytest.fixture
def make_post(db):
    base_time = utc_now() - timedelta(days=30)
    counter = {"n": 0}

    def _make_post(author: User, country: str = "Japan", title: str = None, created_at=None) -> Post:
        counter["n"] += 1
        post = Post(
            user_id=author.id,
            title=title or f"Trip {counter['n']}",
            content="Lovely place",
            date_of_visit="2024-05-01",
            country_name=country,
            created_at=created_at or base_time + timedelta(minutes=counter["n"]),
        )
        db.add(post)
        db.commit()
        db.refresh(post)
        return post

    return _make_post


@pytest.fixture
def add_comments(db):
    def _add_comments(post: Post, author: User, count: int) -> None:
        for i in range(count):
            db.add(Comment(post_id=post.id, user_id=author.id, content=f"comment {i}"))
        db.commit()

    return _add_comments


def identity_of(user: User, provenance: Provenance = Provenance.session) -> Identity:
    return Identity.from_claims(user.public_fields(), provenance)


JSON_HEADERS = {"Accept": "application/json"}
API_HEADERS = {"Accept": "application/json", "X-API-Client": "1"}
