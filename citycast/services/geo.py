import logging
from typing import Optional
import httpx

logger = logging.getLogger(__name__)

OPEN_METEO_GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"


async def _geocode_open_meteo(client: httpx.AsyncClient, city: str) -> Optional[dict]:
    # Primary geocoder: Open-Meteo.
    params = {"name": city, "count": 1, "language": "en", "format": "json"}
    try:
        r = await client.get(OPEN_METEO_GEOCODING_URL, params=params)
        r.raise_for_status()
        data = r.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Open-Meteo geocoding error: %s", e)
        return None

    if not isinstance(data, dict):
        return None
    results = data.get("results") or []
    if not results:
        return None

    top = results[0]
    try:
        lat = float(top["latitude"])
        lon = float(top["longitude"])
    except (KeyError, TypeError, ValueError):
        return None

    return {
        "name": top.get("name") or city,
        "lat": lat,
        "lon": lon,
        "country_code": top.get("country_code"),
        "source": "open-meteo",
    }


async def _geocode_nominatim(client: httpx.AsyncClient, city: str, user_agent: str) -> Optional[dict]:
    # Fallback geocoder: Nominatim (OpenStreetMap). Requires a User-Agent.
    params = {"q": city, "format": "jsonv2", "limit": 1, "addressdetails": 1}
    headers = {"User-Agent": user_agent}
    try:
        r = await client.get(NOMINATIM_URL, params=params, headers=headers)
        r.raise_for_status()
        data = r.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Nominatim geocoding error: %s", e)
        return None

    if not isinstance(data, list) or not data:
        return None

    top = data[0]
    try:
        lat = float(top.get("lat"))
        lon = float(top.get("lon"))
    except (TypeError, ValueError):
        return None

    address = top.get("address") or {}
    country_code = address.get("country_code")
    return {
        "name": top.get("name") or city,
        "lat": lat,
        "lon": lon,
        "country_code": country_code.upper() if country_code else None,
        "source": "nominatim",
    }


async def geocode_city(client: httpx.AsyncClient, city: str, user_agent: str) -> Optional[dict]:
    """
    Resolve a city name to a single place {name, lat, lon, country_code, source}.
    Tries Open-Meteo first, then falls back to Nominatim. Returns None if neither knows it.
    """
    result = await _geocode_open_meteo(client, city)
    if result:
        return result

    result = await _geocode_nominatim(client, city, user_agent)
    if result:
        return result

    logger.info("Geocoding failed for city=%r", city)
    return None
