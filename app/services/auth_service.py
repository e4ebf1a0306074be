"""Registration and password login"""
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging

from app.core.exceptions import InvalidCredentials, ValidationFailed
from app.core.identity import Identity, Provenance
from app.core.security import get_password_hash, verify_password
from app.models.user import User
from app.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


class AuthService:
    """Credential-store backed account operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_user_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email.strip().lower()).first()

    def register(self, name: str, surname: str, email: str, password: str) -> User:
        """
        Create a new account

        Raises:
            ValidationFailed if the email is already registered
        """
        email = email.strip().lower()
        if self.get_user_by_email(email):
            raise ValidationFailed("Email already in use")

        user = User(
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
            # Lost a race with a concurrent registration of the same email
            self.db.rollback()
            raise ValidationFailed("Email already in use")
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Registered user {user.id}")
        return user

    def authenticate(self, email: str, password: str) -> User:
        """
        Check an email/password pair

        Raises:
            InvalidCredentials for an unknown email or wrong password
        """
        user = self.get_user_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            logger.info(f"Failed login attempt for {email}")
            raise InvalidCredentials()

        user.last_login = utc_now()
        self.db.commit()
        return user

    @staticmethod
    def identity_for(user: User, provenance: Provenance = Provenance.session) -> Identity:
        return Identity.from_claims(user.public_fields(), provenance)
