"""Client for the country-data microservice"""
import httpx
import logging
from typing import Optional, Dict, Any, List
from urllib.parse import quote

from app.config import settings
from app.core.exceptions import CountryServiceError, NotFound

logger = logging.getLogger(__name__)


class CountryService:
    """Fetches country lists and details through the API-key protected proxy"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.COUNTRY_API_BASE_URL
        self.api_key = api_key or settings.COUNTRY_API_KEY
        self.timeout = timeout or settings.COUNTRY_API_TIMEOUT_SECONDS
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                }
            )
        return self._client

    async def close(self):
        """Close the HTTP client"""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _get(self, path: str) -> Dict[str, Any]:
        client = await self._get_client()
        try:
            response = await client.get(path)
        except httpx.HTTPError as e:
            logger.error(f"Country service request failed for {path}: {e}")
            raise CountryServiceError()

        if response.status_code == 404:
            raise NotFound("Country not found")
        if response.status_code >= 400:
            logger.error(f"Country service returned {response.status_code} for {path}")
            raise CountryServiceError()

        try:
            body = response.json()
        except ValueError:
            logger.error(f"Country service returned non-JSON body for {path}")
            raise CountryServiceError()

        if not body.get("success"):
            raise NotFound(body.get("error") or "Country not found")
        return body

    async def list_countries(self) -> List[Dict[str, Any]]:
        """All countries as [{name, flag}] sorted by the service"""
        body = await self._get("/all")
        return body.get("data") or []

    async def get_country_details(self, name: str) -> Dict[str, Any]:
        """Normalized details: name, flag, capital, currency, languages"""
        body = await self._get(f"/name/{quote(name, safe='')}")
        data = body.get("data")
        if not data:
            raise NotFound("Country not found")
        return normalize_country(data)


def normalize_country(data: Dict[str, Any]) -> Dict[str, Any]:
    currency = "N/A"
    currencies = data.get("currencies")
    if isinstance(currencies, dict) and currencies:
        code = next(iter(currencies))
        entry = currencies[code]
        currency = (entry.get("name") if isinstance(entry, dict) else None) or code

    languages = "N/A"
    langs = data.get("languages")
    if isinstance(langs, dict) and langs:
        languages = ", ".join(str(v) for v in langs.values())

    return {
        "name": data.get("name"),
        "flag": data.get("flags"),
        "capital": data.get("capital"),
        "currency": currency,
        "languages": languages,
    }


# Shared instance, closed on application shutdown
country_service = CountryService()


def get_country_service() -> CountryService:
    """FastAPI dependency returning the shared client"""
    return country_service
