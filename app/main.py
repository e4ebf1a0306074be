"""
Travel Tales Backend API - Main Application
"""
import logging
import sys
import traceback
import uuid
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from app.config import settings
from app.api.routes import api_router
from app.core.exceptions import TravelTalesError, Unauthenticated
from app.core.middleware import MethodOverrideMiddleware, request_timeout_middleware
from app.core.rate_limit import limiter
from app.core.responses import error_page, error_response, redirect, wants_json
from app.core.sessions import session_store
from app.database import init_db

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Social travel blog: posts, votes, comments, follows and country details",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    redirect_slashes=False
)

app.state.session_store = session_store

# Initialize rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(TravelTalesError)
async def domain_exception_handler(request: Request, exc: TravelTalesError):
    """
    Shape domain rejections per client type:
    - API clients: JSON {success: false, error} with the error's status
    - Browsers: redirect to /login for auth failures, an error page otherwise
    """
    if wants_json(request):
        return error_response(exc.message, exc.status_code)
    if isinstance(exc, Unauthenticated):
        return redirect("/login")
    return error_page(exc.message, exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed path/query parameters are a 400 like any other bad input"""
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    message = f"Invalid input: {details}"
    if wants_json(request):
        return error_response(message, status.HTTP_400_BAD_REQUEST)
    return error_page(message, status.HTTP_400_BAD_REQUEST)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Storage failures are reported as a generic 500, distinct from domain rejections"""
    error_id = str(uuid.uuid4())[:8]
    logger.error(
        f"[ERROR_ID: {error_id}] Database error on {request.method} {request.url.path}",
        exc_info=exc
    )
    message = f"Database error (ref {error_id})"
    if wants_json(request):
        return error_response(message, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return error_page(message, status.HTTP_500_INTERNAL_SERVER_ERROR)


# Global exception handler for unhandled exceptions
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler that:
    - In DEBUG mode: returns detailed error info for development
    - In PRODUCTION mode: returns generic error message, logs details server-side
    """
    # Generate a unique error ID for tracking
    error_id = str(uuid.uuid4())[:8]

    # Always log the full error on the server
    logger.error(
        f"[ERROR_ID: {error_id}] Unhandled exception on {request.method} {request.url.path}",
        exc_info=exc
    )

    if not wants_json(request):
        return error_page("Something went wrong!", status.HTTP_500_INTERNAL_SERVER_ERROR)

    if settings.DEBUG:
        # Development: return detailed error for debugging
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": str(exc),
                "error_id": error_id,
                "type": type(exc).__name__,
                "path": str(request.url.path),
                "traceback": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
            }
        )
    else:
        # Production: return generic error, hide internal details
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "An internal server error occurred. Please try again later.",
                "error_id": error_id
            }
        )


# Request-level timeout
app.middleware("http")(request_timeout_middleware(settings.REQUEST_TIMEOUT_SECONDS))

# Browser forms send PUT/DELETE as POST + _method
app.add_middleware(MethodOverrideMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization", "X-API-Client", "X-Requested-With"],
)


@app.on_event("startup")
async def startup_event():
    """Initialize database and scheduler on startup"""
    logger.info("Starting Travel Tales API...")

    if settings.uses_dev_secrets:
        logger.warning("Using development signing secrets; set JWT_SECRET_KEY and SESSION_SECRET_KEY in production")

    # Initialize database tables
    try:
        init_db()
    except Exception as e:
        logger.critical(f"Database initialization failed: {e}")
        sys.exit(1)

    # Start background scheduler
    from app.scheduler import start_scheduler
    start_scheduler()

    logger.info(f"Database: {settings.DATABASE_URL.split('@')[-1]}")
    logger.info(f"Country service: {settings.COUNTRY_API_BASE_URL}")
    logger.info(f"Debug mode: {settings.DEBUG}")
    logger.info(f"API running at http://{settings.HOST}:{settings.PORT} (docs at /docs)")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down Travel Tales API...")

    # Stop background scheduler
    from app.scheduler import stop_scheduler
    stop_scheduler()

    from app.services.country_service import country_service
    await country_service.close()


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "travel-tales-api",
        "version": "1.0.0"
    }


# Include routes (the feed lives at "/")
app.include_router(api_router)


if __name__ == "__main__":
    import argparse
    import uvicorn

    parser = argparse.ArgumentParser(description="Travel Tales Backend API")
    parser.add_argument(
        "--no-reload",
        action="store_true",
        help="Disable auto-reload on file changes"
    )
    args = parser.parse_args()

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=not args.no_reload
    )
