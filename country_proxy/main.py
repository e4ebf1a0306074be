"""
Country Proxy API - Main Application

Serves trimmed restcountries data to holders of an API key, and lets
account holders generate keys and admins deactivate them.
"""
import logging
import sys
import uuid

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError

from app.core.exceptions import TravelTalesError, Unauthenticated
from app.core.responses import error_page, error_response, redirect, wants_json
from country_proxy.config import DEV_SESSION_SECRET, proxy_settings
from country_proxy.database import init_db
from country_proxy.dependencies import proxy_session_store
from country_proxy.routes import account_router, api_router

logging.basicConfig(
    level=getattr(logging, proxy_settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=proxy_settings.PROJECT_NAME,
    description="API-key protected country data for the travel blog",
    version="1.0.0",
    redirect_slashes=False,
)

app.state.session_store = proxy_session_store


def _json_client(request: Request) -> bool:
    # Country data callers are services, never browsers
    return request.url.path.startswith("/api/") or wants_json(request)


@app.exception_handler(TravelTalesError)
async def domain_exception_handler(request: Request, exc: TravelTalesError):
    if _json_client(request):
        return error_response(exc.message, exc.status_code)
    if isinstance(exc, Unauthenticated):
        return redirect("/login")
    return error_page(exc.message, exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    message = "Invalid input"
    if _json_client(request):
        return error_response(message, status.HTTP_400_BAD_REQUEST)
    return error_page(message, status.HTTP_400_BAD_REQUEST)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    error_id = str(uuid.uuid4())[:8]
    logger.error(
        f"[ERROR_ID: {error_id}] Unhandled exception on {request.method} {request.url.path}",
        exc_info=exc
    )
    message = f"An internal server error occurred (ref {error_id})"
    if _json_client(request):
        return error_response(message, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return error_page(message, status.HTTP_500_INTERNAL_SERVER_ERROR)


@app.on_event("startup")
async def startup_event():
    logger.info("Starting Country Proxy API...")

    if proxy_settings.DEMO_API_KEY:
        logger.warning("Demo API key is accepted; set COUNTRY_PROXY_DEMO_API_KEY='' to disable it")
    if proxy_settings.SESSION_SECRET_KEY == DEV_SESSION_SECRET:
        logger.warning("Using development session secret; set COUNTRY_PROXY_SESSION_SECRET_KEY in production")

    try:
        init_db()
    except Exception as e:
        logger.critical(f"Proxy database initialization failed: {e}")
        sys.exit(1)

    logger.info(f"Upstream: {proxy_settings.UPSTREAM_BASE_URL}")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down Country Proxy API...")

    from country_proxy.upstream import rest_countries
    await rest_countries.close()


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": "country-proxy",
        "version": "1.0.0"
    }


app.include_router(api_router)
app.include_router(account_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "country_proxy.main:app",
        host=proxy_settings.HOST,
        port=proxy_settings.PORT,
    )
