"""
Country Proxy Configuration
"""
from pydantic_settings import BaseSettings

DEMO_API_KEY = "demo-api-key"
DEV_SESSION_SECRET = "country-proxy-dev-session-secret"


class ProxySettings(BaseSettings):
    """Settings for the API-key protected country proxy (COUNTRY_PROXY_* variables)"""

    # Database
    DATABASE_URL: str = "sqlite:///./country_proxy.db"
    DATABASE_ECHO: bool = False

    # Upstream country data
    UPSTREAM_BASE_URL: str = "https://restcountries.com/v3.1"
    UPSTREAM_TIMEOUT_SECONDS: float = 10.0

    # Shared key accepted without a database lookup (empty string disables it)
    DEMO_API_KEY: str = DEMO_API_KEY

    # Account sessions
    SESSION_SECRET_KEY: str = DEV_SESSION_SECRET
    SESSION_COOKIE_NAME: str = "country_proxy_session"
    SESSION_MAX_AGE_SECONDS: int = 86400

    # Server
    PROJECT_NAME: str = "Country Proxy API"
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 7000

    class Config:
        env_prefix = "COUNTRY_PROXY_"
        case_sensitive = True


# Global settings instance
proxy_settings = ProxySettings()
