"""Background scheduler for periodic tasks"""
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from app.config import settings
import logging

logger = logging.getLogger(__name__)
scheduler = AsyncIOScheduler()


def start_scheduler():
    """Start the background scheduler"""
    try:
        scheduler.start()
        logger.info("Scheduler started successfully")
    except Exception as e:
        logger.error(f"Failed to start scheduler: {e}")


def stop_scheduler():
    """Stop the background scheduler"""
    try:
        scheduler.shutdown()
        logger.info("Scheduler stopped successfully")
    except Exception as e:
        logger.error(f"Failed to stop scheduler: {e}")


@scheduler.scheduled_job('interval', minutes=settings.SESSION_PURGE_INTERVAL_MINUTES)
async def purge_expired_sessions():
    """
    Drop expired browser sessions from the in-process store
    Runs every SESSION_PURGE_INTERVAL_MINUTES
    """
    from app.core.sessions import session_store

    removed = session_store.purge_expired()
    if removed:
        logger.info(f"Purged {removed} expired sessions, {len(session_store)} active")
