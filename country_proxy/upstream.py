"""Client for the public restcountries API"""
import httpx
import logging
from typing import Any, Dict, List, Optional

from app.core.exceptions import CountryServiceError, NotFound
from country_proxy.config import proxy_settings

logger = logging.getLogger(__name__)


class RestCountriesClient:
    """Fetches raw country records and trims them to what the blog needs"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or proxy_settings.UPSTREAM_BASE_URL
        self.timeout = timeout or proxy_settings.UPSTREAM_TIMEOUT_SECONDS
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _get(self, path: str, failure: str, params: Optional[Dict[str, str]] = None) -> Any:
        client = await self._get_client()
        try:
            response = await client.get(path, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Upstream request failed for {path}: {e}")
            raise CountryServiceError(failure)

        if response.status_code == 404:
            raise NotFound("Country not found")
        if response.status_code >= 400:
            logger.error(f"Upstream returned {response.status_code} for {path}")
            raise CountryServiceError(failure)

        try:
            return response.json()
        except ValueError:
            logger.error(f"Upstream returned non-JSON body for {path}")
            raise CountryServiceError(failure)

    async def list_all(self) -> List[Dict[str, str]]:
        """Every country as {name, flag}, sorted by name"""
        records = await self._get("/all", "Failed to fetch countries", params={"fields": "name,flags"})
        if not isinstance(records, list):
            raise CountryServiceError("Failed to fetch countries")
        countries = [summarize_country(r) for r in records if isinstance(r, dict)]
        return sorted(countries, key=lambda c: c["name"])

    async def lookup(self, path: str) -> Dict[str, Any]:
        """
        Forward ``path`` (e.g. ``name/japan``) and trim the first match

        Raises:
            NotFound when the upstream has no match
            CountryServiceError on upstream failure
        """
        records = await self._get(f"/{path.lstrip('/')}", "Failed to fetch data")
        if isinstance(records, dict):
            records = [records]
        if not records or not isinstance(records[0], dict):
            raise NotFound("Country not found")
        return describe_country(records[0])


def _common_name(record: Dict[str, Any]) -> str:
    name = record.get("name")
    if isinstance(name, dict):
        return name.get("common") or "N/A"
    return name or "N/A"


def _png_flag(record: Dict[str, Any]) -> Optional[str]:
    flags = record.get("flags")
    if isinstance(flags, dict):
        return flags.get("png")
    return None


def summarize_country(record: Dict[str, Any]) -> Dict[str, str]:
    return {"name": _common_name(record), "flag": _png_flag(record) or ""}


def describe_country(record: Dict[str, Any]) -> Dict[str, Any]:
    capital = record.get("capital")
    return {
        "name": _common_name(record),
        "capital": capital[0] if isinstance(capital, list) and capital else "N/A",
        "flags": _png_flag(record) or "N/A",
        "languages": record.get("languages") or {},
        "currencies": record.get("currencies") or {},
    }


# Shared instance, closed on application shutdown
rest_countries = RestCountriesClient()


def get_rest_countries() -> RestCountriesClient:
    return rest_countries
