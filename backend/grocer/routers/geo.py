"""
grocer/routers/geo.py
Location picker support: reverse geocoding for a dropped pin and place search
for the address box. Both proxy OpenStreetMap Nominatim.
"""
from typing import List

from fastapi import APIRouter, Depends, Query

from grocer.config import Settings, get_settings
from grocer.integrations import geocoding
from grocer.integrations.geocoding import Place

router = APIRouter(prefix="/geo", tags=["Geo"])


@router.get("/reverse", response_model=Place)
def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    settings: Settings = Depends(get_settings),
):
    return geocoding.reverse(lat, lon, settings=settings)


@router.get("/search", response_model=List[Place])
def search_places(
    q: str = Query(..., min_length=2, description="Place or street name"),
    limit: int = Query(5, ge=1, le=10),
    settings: Settings = Depends(get_settings),
):
    return geocoding.search(q, limit=limit, settings=settings)
