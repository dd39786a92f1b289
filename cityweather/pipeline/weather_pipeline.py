"""Weather pipeline: city lookup, cache-or-fetch, normalization and statistics."""

import json
import logging
import threading
from dataclasses import fields

from cityweather.analysis.aggregator import summarize
from cityweather.config.schema import AppConfig
from cityweather.errors import StorageError
from cityweather.ingest.freshness import is_fresh
from cityweather.ingest.meteo_concept_client import MeteoConceptClient
from cityweather.ingest.normalizer import build_window
from cityweather.models.common import today_iso
from cityweather.models.forecast import (
    DailyForecast,
    ForecastWindow,
    StoredForecastRow,
    WeatherReport,
)
from cityweather.storage.stores import CityRegistry, ForecastStore

logger = logging.getLogger(__name__)

_DETAIL_FIELDS = {f.name for f in fields(DailyForecast)} - {"date"}


class WeatherPipeline:
    def __init__(
        self,
        registry: CityRegistry,
        store: ForecastStore,
        provider: MeteoConceptClient,
        config: AppConfig | None = None,
    ):
        self.registry = registry
        self.store = store
        self.provider = provider
        self.config = config or AppConfig()
        # One lock per registered city; bounded by the registry, never evicted
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def window_days(self) -> int:
        return self.config.forecast.window_days

    def get_weather(self, location: str, today: str | None = None) -> WeatherReport:
        """Build the weather report for a location.

        Raises NotFound for unknown cities before any forecast access,
        UpstreamError when the provider fails and StorageError on persistence
        failures. No partial report is ever returned.
        """
        city = self.registry.lookup(location)
        today = today or today_iso()

        if is_fresh(self.store, location, today):
            window = self._load_window(location, today)
            from_cache = True
        else:
            # Concurrent misses for one location wait here and re-check
            # freshness, so only the first fetches upstream.
            with self._lock_for(location):
                if is_fresh(self.store, location, today):
                    window = self._load_window(location, today)
                    from_cache = True
                else:
                    window = self._refresh_window(location)
                    from_cache = False

        statistics = summarize(window)
        logger.info(
            "Weather for %s: %d days (%s), rain_sum=%.1f avg_temp=%.2f",
            location, statistics.day_count, "cache" if from_cache else "provider",
            statistics.rain_sum, statistics.avg_temperature,
        )
        return WeatherReport(
            city=city, window=window, statistics=statistics, from_cache=from_cache
        )

    def _load_window(self, location: str, today: str) -> ForecastWindow:
        rows = self.store.query_rows(location, today, limit=self.window_days)
        logger.debug("Cache hit for %s: %d stored rows", location, len(rows))
        return tuple(decode_row(row) for row in rows)

    def _refresh_window(self, location: str) -> ForecastWindow:
        logger.info("Cache miss for %s, fetching from provider", location)
        raw_days = self.provider.fetch_forecast(location, days=self.window_days)
        window = build_window(raw_days, limit=self.window_days)
        self.store.upsert_rows(
            location, [(day.date, encode_details(day)) for day in window]
        )
        return window

    def _lock_for(self, location: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(location)
            if lock is None:
                lock = self._locks[location] = threading.Lock()
            return lock


def encode_details(day: DailyForecast) -> str:
    return json.dumps(day.details(), sort_keys=True)


def decode_row(row: StoredForecastRow) -> DailyForecast:
    """Rebuild a DailyForecast from its stored row without re-normalizing."""
    try:
        details = json.loads(row.details)
    except ValueError as e:
        raise StorageError(
            f"Corrupt forecast details for {row.location} on {row.date}"
        ) from e
    if not isinstance(details, dict):
        raise StorageError(f"Corrupt forecast details for {row.location} on {row.date}")
    known = {k: v for k, v in details.items() if k in _DETAIL_FIELDS}
    return DailyForecast(date=row.date, **known)
