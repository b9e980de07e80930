from typing import Optional
import httpx

from citycast.errors import ProviderError
from citycast.services.geo import geocode_city

FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
DEFAULT_USER_AGENT = "citycast/1.0 (weather lookup)"

# Minimal mapping for Open-Meteo weather codes.
WEATHER_CODE_DESC = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    71: "Slight snow",
    73: "Moderate snow",
    75: "Heavy snow",
    80: "Rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    95: "Thunderstorm",
    96: "Thunderstorm w/ slight hail",
    99: "Thunderstorm w/ heavy hail",
}

def _c_to_f(c: Optional[float]) -> Optional[float]:
    if c is None:
        return None
    return c * 9 / 5 + 32


class WeatherLookupClient:
    """
    Current weather by city name.

    The city is geocoded first, then current conditions are read from the
    Open-Meteo forecast API in metric units. Any failure raises ProviderError.
    """

    def __init__(self, client: httpx.AsyncClient, user_agent: str = DEFAULT_USER_AGENT):
        self._client = client
        self._user_agent = user_agent

    async def lookup(self, city: str) -> dict:
        place = await geocode_city(self._client, city, self._user_agent)
        if place is None:
            raise ProviderError(f"unknown city {city!r}")

        params = {
            "latitude": place["lat"],
            "longitude": place["lon"],
            "current": "temperature_2m,apparent_temperature,relative_humidity_2m,"
                       "surface_pressure,precipitation,weather_code,wind_speed_10m",
            "timezone": "auto",
        }
        try:
            r = await self._client.get(FORECAST_URL, params=params)
            r.raise_for_status()
            data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderError(f"weather request failed for {city!r}: {e}") from e

        cur = data.get("current") if isinstance(data, dict) else None
        if not isinstance(cur, dict) or cur.get("temperature_2m") is None:
            raise ProviderError(f"malformed weather payload for {city!r}")

        code = cur.get("weather_code")
        temp_c = cur.get("temperature_2m")
        feels_c = cur.get("apparent_temperature")

        return {
            "name": place["name"],
            "country_code": place.get("country_code"),
            "lat": place["lat"],
            "lon": place["lon"],
            "temperature_c": temp_c,
            "temperature_f": _c_to_f(temp_c),
            "apparent_c": feels_c,
            "apparent_f": _c_to_f(feels_c),
            "humidity": cur.get("relative_humidity_2m"),   # %
            "pressure": cur.get("surface_pressure"),       # hPa
            "wind_speed": cur.get("wind_speed_10m"),       # km/h
            "precipitation": cur.get("precipitation"),     # mm
            "weather_code": code,
            "weather_desc": WEATHER_CODE_DESC.get(code, f"Code {code}"),
            "observed_at": cur.get("time"),
        }
