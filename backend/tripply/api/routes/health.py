"""Health check endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from backend.tripply.config import Settings, get_settings, secret_value

router = APIRouter()


def configured_providers(settings: Settings) -> dict[str, bool]:
    """Which external providers have credentials configured."""
    return {
        "openai": bool(secret_value(settings.openai_api_key)),
        "google_places": bool(secret_value(settings.google_places_api_key)),
        "google_search": bool(
            secret_value(settings.google_search_api_key) and settings.google_search_engine_id
        ),
        "youtube": bool(secret_value(settings.youtube_api_key)),
        "ticketmaster": bool(secret_value(settings.ticketmaster_api_key)),
        "serpapi": bool(secret_value(settings.serpapi_api_key)),
        "reddit": bool(settings.reddit_client_id and secret_value(settings.reddit_client_secret)),
        # Open-Meteo is keyless
        "open_meteo": True,
    }


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple liveness check.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz")
async def healthz(settings: Annotated[Settings, Depends(get_settings)]) -> dict[str, Any]:
    """Readiness details.

    The service runs without any provider key (stub model, tools report
    themselves unavailable), so status is "degraded" rather than an error
    when the language model is not configured.
    """
    providers = configured_providers(settings)
    return {
        "status": "ok" if providers["openai"] else "degraded",
        "providers": providers,
    }
