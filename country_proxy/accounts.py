"""Proxy accounts and API key lifecycle"""
from typing import Any, Dict, List, Optional
import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import InvalidCredentials, NotFound, ValidationFailed
from app.core.identity import Identity, Provenance
from app.core.security import get_password_hash, verify_password
from country_proxy.models import ApiKey, ProxyUser

logger = logging.getLogger(__name__)


class AccountService:
    """Registration, login and admin flags for proxy accounts"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> Optional[ProxyUser]:
        return self.db.get(ProxyUser, user_id)

    def get_by_email(self, email: str) -> Optional[ProxyUser]:
        return self.db.query(ProxyUser).filter(ProxyUser.email == email.strip().lower()).first()

    def register(self, name: str, surname: str, email: str, password: str) -> ProxyUser:
        """
        Create an account

        Raises:
            ValidationFailed if the email is already registered
        """
        email = email.strip().lower()
        if self.get_by_email(email):
            raise ValidationFailed("Email already in use")

        user = ProxyUser(
            name=name.strip(),
            surname=surname.strip(),
            email=email,
            password_hash=get_password_hash(password),
        )
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError:
            self.db.rollback()
            raise ValidationFailed("Email already in use")

        logger.info(f"Registered proxy account {user.id}")
        return user

    def authenticate(self, email: str, password: str) -> ProxyUser:
        user = self.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            logger.info(f"Failed proxy login attempt for {email}")
            raise InvalidCredentials()
        return user

    def set_admin(self, email: str, is_admin: bool = True) -> ProxyUser:
        user = self.get_by_email(email)
        if user is None:
            raise NotFound("User not found")
        user.is_admin = is_admin
        self.db.commit()
        logger.info(f"Admin flag for proxy account {user.id} set to {is_admin}")
        return user

    def list_users(self) -> List[Dict[str, Any]]:
        users = self.db.query(ProxyUser).order_by(ProxyUser.id).all()
        return [{**u.public_fields(), "is_admin": u.is_admin, "created_at": u.created_at} for u in users]

    @staticmethod
    def identity_for(user: ProxyUser) -> Identity:
        return Identity.from_claims(user.public_fields(), Provenance.session)


class ApiKeyService:
    """Issues, validates and deactivates bearer keys"""

    def __init__(self, db: Session, demo_key: str = ""):
        self.db = db
        self.demo_key = demo_key

    def generate(self, user_id: int) -> ApiKey:
        """New active key for ``user_id``; the raw value is only shown once"""
        key = ApiKey(user_id=user_id, api_key=str(uuid.uuid4()), is_active=True)
        self.db.add(key)
        self.db.commit()
        self.db.refresh(key)
        logger.info(f"Generated API key {key.id} for proxy account {user_id}")
        return key

    def is_valid(self, raw_key: str) -> bool:
        if not raw_key:
            return False
        if self.demo_key and raw_key == self.demo_key:
            return True
        return (
            self.db.query(ApiKey.id)
            .filter(ApiKey.api_key == raw_key, ApiKey.is_active.is_(True))
            .first()
            is not None
        )

    def deactivate(self, key_id: int) -> ApiKey:
        """
        Mark a key inactive

        Raises:
            NotFound if no key has ``key_id``
        """
        key = self.db.get(ApiKey, key_id)
        if key is None:
            raise NotFound("API key not found")
        key.is_active = False
        self.db.commit()
        logger.info(f"Deactivated API key {key.id}")
        return key

    def list_keys(self) -> List[Dict[str, Any]]:
        """Every key with its owner's email, newest first"""
        rows = (
            self.db.query(ApiKey, ProxyUser.email)
            .join(ProxyUser, ApiKey.user_id == ProxyUser.id)
            .order_by(ApiKey.created_at.desc(), ApiKey.id.desc())
            .all()
        )
        return [
            {
                "id": key.id,
                "user_id": key.user_id,
                "user_email": email,
                "api_key": key.api_key,
                "created_at": key.created_at,
                "is_active": key.is_active,
            }
            for key, email in rows
        ]
