"""Weather adapter using Open-Meteo API (keyless, free tier)."""

import logging
import re
from datetime import date

import httpx

from backend.tripply.adapters.provenance import citation_for_http, http_client
from backend.tripply.models.common import Coordinates, ToolResult
from backend.tripply.models.tool_results import WeatherDay, WeatherReport
from backend.tripply.tools.params import GetWeatherParams

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://geocoding-api.open-meteo.com/v1/search"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"

# WMO weather interpretation codes
WEATHER_CONDITIONS: dict[int, str] = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Foggy",
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
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}

_COORDINATES = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*,\s*(-?\d+(?:\.\d+)?)\s*$")


async def geocode_location(
    location: str,
    client: httpx.AsyncClient,
    base_url: str = GEOCODE_URL,
) -> tuple[str, Coordinates] | None:
    """Resolve a place name (or "lat,lng" string) to coordinates.

    Returns:
        (display name, coordinates), or None if nothing matched
    """
    match = _COORDINATES.match(location)
    if match:
        return location, Coordinates(lat=float(match.group(1)), lng=float(match.group(2)))

    response = await client.get(
        base_url, params={"name": location, "count": 1, "language": "en", "format": "json"}
    )
    response.raise_for_status()
    results = response.json().get("results") or []
    if not results:
        return None

    top = results[0]
    name = ", ".join(part for part in (top.get("name"), top.get("country")) if part)
    return name or location, Coordinates(lat=top["latitude"], lng=top["longitude"])


async def fetch_weather(
    params: GetWeatherParams,
    client: httpx.AsyncClient | None = None,
    forecast_url: str = FORECAST_URL,
    geocode_url: str = GEOCODE_URL,
) -> ToolResult[WeatherReport]:
    """Fetch a daily forecast from Open-Meteo.

    Args:
        params: Location and optional date window
        client: Optional httpx client (for testing with mocks)
        forecast_url: Open-Meteo forecast endpoint
        geocode_url: Open-Meteo geocoding endpoint

    Returns:
        ToolResult wrapping a WeatherReport with a citation

    Raises:
        httpx.HTTPError: On network or HTTP errors
    """
    async with http_client(client) as http:
        resolved = await geocode_location(params.location, http, geocode_url)
        if resolved is None:
            return ToolResult.failure(f"Could not find location: {params.location}")
        name, coordinates = resolved

        # Docs: https://open-meteo.com/en/docs
        query: dict[str, str | float] = {
            "latitude": coordinates.lat,
            "longitude": coordinates.lng,
            "daily": (
                "temperature_2m_max,temperature_2m_min,weathercode,"
                "precipitation_probability_max,windspeed_10m_max"
            ),
            "timezone": "auto",
        }
        if params.dates:
            query["start_date"] = params.dates.start.isoformat()
            query["end_date"] = params.dates.end.isoformat()
        else:
            query["forecast_days"] = 10

        response = await http.get(forecast_url, params=query)
        response.raise_for_status()
        daily = response.json()["daily"]

    # Response structure: {daily: {time: [...], temperature_2m_max: [...], ...}}
    forecast = []
    for i, day in enumerate(daily["time"]):
        high = daily["temperature_2m_max"][i]
        low = daily["temperature_2m_min"][i]
        code = daily["weathercode"][i]
        precip = daily["precipitation_probability_max"][i]
        wind = daily["windspeed_10m_max"][i]

        forecast.append(
            WeatherDay(
                date=date.fromisoformat(day),
                high_c=high if high is not None else 20.0,
                low_c=low if low is not None else 10.0,
                condition=WEATHER_CONDITIONS.get(code, "Unknown"),
                # Open-Meteo precipitation_probability is 0-100, we want 0.0-1.0
                rain_chance=precip / 100.0 if precip is not None else 0.0,
                wind_kmh=wind,
            )
        )

    logger.debug("Weather for %s: %d days", name, len(forecast))
    return ToolResult.ok(
        WeatherReport(location=name, coordinates=coordinates, forecast=forecast),
        sources=[
            citation_for_http(
                "Open-Meteo Weather API",
                "https://open-meteo.com",
                snippet=f"Weather forecast for {name}",
                confidence=0.95,
            )
        ],
    )
