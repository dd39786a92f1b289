"""Meteo-Concept API client. Failed calls are not retried."""

import logging
import os

import httpx

from cityweather.config.schema import METEO_CONCEPT_BASE_URL
from cityweather.errors import UpstreamError

logger = logging.getLogger(__name__)

TOKEN_ENV_VARS = ("API_KEY", "API_TOKEN")


class MeteoConceptClient:
    def __init__(
        self,
        token: str | None = None,
        base_url: str = METEO_CONCEPT_BASE_URL,
        timeout: float = 10.0,
    ):
        self.token = token or _token_from_env()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def fetch_forecast(self, location: str, days: int = 4) -> list[dict]:
        """Fetch daily forecast records for an INSEE code, at most ``days`` of them."""
        data = self._get("/forecast/daily", {"insee": location, "days": days})
        forecast = data.get("forecast") if isinstance(data, dict) else None
        if not isinstance(forecast, list):
            raise UpstreamError(f"Malformed forecast payload for {location}")
        days_data = forecast[:days]
        if not all(isinstance(day, dict) for day in days_data):
            raise UpstreamError(f"Malformed forecast payload for {location}: non-object day")
        return days_data

    def fetch_city(self, location: str) -> dict:
        """Fetch the provider's city description via the next-hours endpoint."""
        data = self._get("/forecast/nextHours", {"insee": location, "hourly": "true"})
        city = data.get("city") if isinstance(data, dict) else None
        if not isinstance(city, dict):
            raise UpstreamError(f"Malformed city payload for {location}")
        return city

    def _get(self, endpoint: str, params: dict) -> dict:
        if not self.token:
            raise UpstreamError("Meteo-Concept API token is not configured")
        url = f"{self.base_url}{endpoint}"
        logger.info("Meteo-Concept GET %s insee=%s", endpoint, params.get("insee"))
        try:
            resp = httpx.get(
                url, params={"token": self.token, **params}, timeout=self.timeout
            )
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            logger.error("Meteo-Concept API error for %s: %s", endpoint, e)
            raise UpstreamError(
                f"Provider returned {e.response.status_code} for {endpoint}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            logger.error("Meteo-Concept request failed for %s: %s", endpoint, e)
            raise UpstreamError(f"Provider unreachable: {e}") from e
        except ValueError as e:
            logger.error("Meteo-Concept returned invalid JSON for %s: %s", endpoint, e)
            raise UpstreamError(f"Invalid JSON from provider for {endpoint}") from e


def _token_from_env() -> str:
    for name in TOKEN_ENV_VARS:
        value = os.environ.get(name, "")
        if value:
            return value
    return ""
