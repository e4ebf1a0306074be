"""
Quick start script for running the Travel Tales backend
"""
import uvicorn
from app.config import settings

if __name__ == "__main__":
    print("=" * 70)
    print("Starting Travel Tales Backend API")
    print("=" * 70)
    print(f"Host: {settings.HOST}:{settings.PORT}")
    print(f"Database: {settings.DATABASE_URL.split('@')[-1]}")
    print(f"API Docs: http://{settings.HOST}:{settings.PORT}/docs")
    print(f"Debug: {settings.DEBUG}")
    print(f"Country service: {settings.COUNTRY_API_BASE_URL}")
    print("=" * 70)

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
