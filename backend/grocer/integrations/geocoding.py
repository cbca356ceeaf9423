# grocer/integrations/geocoding.py
"""
OpenStreetMap Nominatim client (minimum).
- reverse(lat, lon): coordinates picked on the map -> readable address.
- search(query, limit): free-text place search, restricted to the delivery area.

Nominatim's usage policy requires an identifying User-Agent; it is taken from settings.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import BaseModel

from grocer.config import Settings, get_settings
from grocer.core.errors import GeocodingError

logger = logging.getLogger("grocer.geocoding")


class Place(BaseModel):
    display_name: str
    latitude: float
    longitude: float
    road: Optional[str] = None
    suburb: Optional[str] = None
    township: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None


def _to_place(raw: Dict[str, Any]) -> Place:
    addr = raw.get("address") or {}
    return Place(
        display_name=raw.get("display_name", ""),
        latitude=float(raw.get("lat", 0) or 0),
        longitude=float(raw.get("lon", 0) or 0),
        road=addr.get("road"),
        suburb=addr.get("suburb") or addr.get("neighbourhood"),
        township=addr.get("suburb") or addr.get("residential") or addr.get("quarter"),
        city=addr.get("city") or addr.get("town") or addr.get("village"),
        country=addr.get("country"),
    )


def _get(path: str, params: Dict[str, Any], settings: Settings) -> Any:
    url = f"{settings.nominatim_base_url.rstrip('/')}/{path}"
    headers = {"User-Agent": settings.nominatim_user_agent, "Accept": "application/json"}
    try:
        resp = requests.get(url, params=params, headers=headers, timeout=settings.nominatim_timeout)
        resp.raise_for_status()
        return resp.json()
    except requests.RequestException as exc:
        logger.warning("Nominatim %s failed: %s", path, exc)
        raise GeocodingError(f"Geocoding service error: {exc}") from exc
    except ValueError as exc:
        logger.warning("Nominatim %s returned non-JSON body", path)
        raise GeocodingError("Geocoding service returned an invalid response") from exc


def reverse(lat: float, lon: float, settings: Optional[Settings] = None) -> Place:
    settings = settings or get_settings()
    data = _get("reverse", {"format": "json", "lat": lat, "lon": lon, "addressdetails": 1}, settings)
    if not isinstance(data, dict) or data.get("error"):
        raise GeocodingError(f"No address found for {lat},{lon}", status_code=404)
    return _to_place(data)


def search(query: str, limit: int = 5, settings: Optional[Settings] = None) -> List[Place]:
    settings = settings or get_settings()
    q = query.strip()
    if settings.geocode_locality and settings.geocode_locality.lower() not in q.lower():
        q = f"{q}, {settings.geocode_locality}"
    params: Dict[str, Any] = {
        "q": q,
        "format": "json",
        "limit": limit,
        "addressdetails": 1,
    }
    if settings.geocode_viewbox:
        params["viewbox"] = settings.geocode_viewbox
        params["bounded"] = 1
    data = _get("search", params, settings)
    if not isinstance(data, list):
        return []
    return [_to_place(item) for item in data]
