"""
Application Configuration
"""
from pydantic_settings import BaseSettings
from typing import List

DEV_JWT_SECRET = "travel-tales-dev-jwt-secret"
DEV_SESSION_SECRET = "travel-tales-dev-session-secret"


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str = "sqlite:///./travel_tales.db"
    DATABASE_ECHO: bool = False

    # JWT (development fallback only, set JWT_SECRET_KEY in production)
    JWT_SECRET_KEY: str = DEV_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 1440  # 24 hours

    # Password hashing
    BCRYPT_ROUNDS: int = 12

    # Browser sessions
    SESSION_SECRET_KEY: str = DEV_SESSION_SECRET
    SESSION_COOKIE_NAME: str = "travel_tales_session"
    SESSION_MAX_AGE_SECONDS: int = 86400  # 1 day
    SESSION_PURGE_INTERVAL_MINUTES: int = 15

    # API
    PROJECT_NAME: str = "Travel Tales API"
    DEBUG: bool = True
    ALLOWED_ORIGINS: str = "*"
    LOG_LEVEL: str = "INFO"
    REQUEST_TIMEOUT_SECONDS: float = 30.0
    LOGIN_RATE_LIMIT: str = "10/minute"
    RATE_LIMIT_ENABLED: bool = True

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from string"""
        if self.ALLOWED_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    @property
    def uses_dev_secrets(self) -> bool:
        """True when either signing secret is still the development literal"""
        return self.JWT_SECRET_KEY == DEV_JWT_SECRET or self.SESSION_SECRET_KEY == DEV_SESSION_SECRET

    # Country data microservice
    COUNTRY_API_BASE_URL: str = "http://country-info:7000/api/v3.1"
    COUNTRY_API_KEY: str = "demo-api-key"
    COUNTRY_API_TIMEOUT_SECONDS: float = 10.0

    # Feed defaults
    FEED_DEFAULT_LIMIT: int = 10
    FEED_MAX_LIMIT: int = 100
    COMMENTS_DEFAULT_LIMIT: int = 10

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
