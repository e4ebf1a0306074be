"""Proxy database: API-key accounts live apart from the blog's tables"""
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
import logging

from app.database import build_engine
from country_proxy.config import proxy_settings

logger = logging.getLogger(__name__)

engine = build_engine(proxy_settings.DATABASE_URL, echo=proxy_settings.DATABASE_ECHO)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """FastAPI dependency yielding a proxy database session per request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine = None) -> None:
    import country_proxy.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Proxy database tables ready")
