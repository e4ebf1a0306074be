"""User model"""
from sqlalchemy import Column, String, DateTime, Integer
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.time_utils import utc_now


class User(Base):
    """Registered author account"""

    __tablename__ = "users"

    # Identity
    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    # Profile
    name = Column(String(100), nullable=False)
    surname = Column(String(100), nullable=False)
    created_at = Column(DateTime, default=utc_now, nullable=False)
    last_login = Column(DateTime, nullable=True)

    # Relationships
    posts = relationship("Post", back_populates="author", cascade="all, delete-orphan")
    comments = relationship("Comment", back_populates="author", cascade="all, delete-orphan")

    @property
    def display_name(self) -> str:
        return f"{self.name} {self.surname}".strip()

    def public_fields(self) -> dict:
        """Fields that are safe to expose and to embed in tokens/sessions"""
        return {
            "id": self.id,
            "name": self.name,
            "surname": self.surname,
            "email": self.email,
        }

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"
