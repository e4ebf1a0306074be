"""Country data proxy endpoints"""
from fastapi import APIRouter, Depends, Query, Path

from app.core.exceptions import ValidationFailed
from app.core.responses import success_response
from app.services.country_service import CountryService, get_country_service

router = APIRouter(tags=["countries"])


@router.get("/api/countries")
async def list_countries(countries: CountryService = Depends(get_country_service)):
    """All countries (name and flag) for the post form dropdown"""
    return success_response(await countries.list_countries())


@router.get("/api/country-details")
async def country_details(
    name: str = Query("", description="Country name"),
    countries: CountryService = Depends(get_country_service),
):
    """Name, flag, capital, currency and languages for one country"""
    if not name.strip():
        raise ValidationFailed("Country name is required")
    return success_response(await countries.get_country_details(name.strip()))


@router.get("/country/{name}")
async def country_page(
    name: str = Path(..., description="Country name"),
    countries: CountryService = Depends(get_country_service),
):
    """Country details page data"""
    return success_response({"country": await countries.get_country_details(name)})
