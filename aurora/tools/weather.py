"""Live weather via the Open-Meteo geocoding and forecast APIs (no API key)."""

import logging

import httpx

from aurora.config import settings
from aurora.errors import ToolError
from aurora.tools.base import tool_boundary

logger = logging.getLogger(__name__)

GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"

NETWORK_APOLOGY = (
    "I'm sorry, I couldn't fetch the weather data due to a network issue. "
    "Please check your internet connection."
)


async def _geocode(client: httpx.AsyncClient, location: str) -> dict | None:
    """Resolve a place name to the first Open-Meteo match, or None."""
    resp = await client.get(
        GEOCODING_URL,
        params={"name": location, "count": 1, "language": "en", "format": "json"},
    )
    if resp.status_code != 200:
        logger.warning("Geocoding failed for %r: HTTP %d", location, resp.status_code)
        return None
    results = resp.json().get("results") or []
    if not results:
        logger.warning("Geocoding found no results for %r", location)
        return None
    return results[0]


@tool_boundary("weather", NETWORK_APOLOGY)
async def weather_report(location: str) -> str:
    """Report current temperature, humidity and wind for ``location`` (metric)."""
    logger.info("Weather request for: %s", location)
    try:
        async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
            place = await _geocode(client, location)
            if place is None:
                return (
                    f'I couldn\'t find a location called "{location}". '
                    "Please check the spelling or try a more specific name."
                )

            name = place.get("name", location)
            country = place.get("country", "")
            where = f"{name}, {country}" if country else name
            logger.info(
                "Found coordinates for %s: lat %s, lon %s",
                where,
                place.get("latitude"),
                place.get("longitude"),
            )

            resp = await client.get(
                FORECAST_URL,
                params={
                    "latitude": place["latitude"],
                    "longitude": place["longitude"],
                    "current": "temperature_2m,wind_speed_10m,relative_humidity_2m",
                    "timezone": "auto",
                    "forecast_days": 1,
                },
            )
    except httpx.HTTPError as exc:
        raise ToolError(f"Weather request failed: {exc}") from exc

    data = resp.json()
    current = data.get("current")
    if resp.status_code != 200 or not current:
        reason = data.get("reason", "Unknown error")
        logger.error("Open-Meteo forecast error for %s: %s", where, reason)
        return (
            f"I encountered an error while fetching weather data for {where}: {reason}. "
            "Please try again later."
        )

    logger.info("Weather data retrieved for %s", where)
    return (
        f"The current weather in {where} is {current['temperature_2m']}°C. "
        f"Humidity is {current['relative_humidity_2m']}% "
        f"and wind speed is {current['wind_speed_10m']} km/h."
    )
