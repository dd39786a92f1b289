"""Tests for the weather pipeline with a mocked provider."""

import json
import sqlite3
import threading
import time
from unittest.mock import MagicMock

import pytest

from cityweather.errors import NotFound, StorageError, UpstreamError
from cityweather.ingest.meteo_concept_client import MeteoConceptClient
from cityweather.models.forecast import DailyForecast, StoredForecastRow
from cityweather.pipeline.weather_pipeline import (
    WeatherPipeline,
    decode_row,
    encode_details,
)
from cityweather.storage.stores import CityRegistry, ForecastStore

TODAY = "2026-10-19"


def _raw_days() -> list[dict]:
    return [
        {"datetime": f"2026-10-{19 + i}T01:00:00+0200", "tmin": 2, "tmax": 10, "probarain": rain}
        for i, rain in enumerate([10, 20, 30, 40])
    ]


@pytest.fixture
def provider() -> MagicMock:
    mock = MagicMock(spec=MeteoConceptClient)
    mock.fetch_forecast.return_value = _raw_days()
    return mock


@pytest.fixture
def pipeline(registry: CityRegistry, store: ForecastStore, provider: MagicMock) -> WeatherPipeline:
    return WeatherPipeline(registry, store, provider)


class TestCacheMiss:
    def test_fetches_normalizes_and_summarizes(self, pipeline: WeatherPipeline, provider: MagicMock):
        report = pipeline.get_weather("75101", TODAY)

        provider.fetch_forecast.assert_called_once_with("75101", days=4)
        assert report.from_cache is False
        assert report.city.name == "Paris 1er Arrondissement"
        assert report.statistics.rain_sum == 100
        assert report.statistics.avg_temperature == 6
        assert report.statistics.day_count == 4
        assert [d.date for d in report.window] == [
            "2026-10-19", "2026-10-20", "2026-10-21", "2026-10-22",
        ]

    def test_persists_window(self, pipeline: WeatherPipeline, store: ForecastStore):
        report = pipeline.get_weather("75101", TODAY)
        rows = store.query_rows("75101", TODAY)
        assert len(rows) == 4
        assert tuple(decode_row(r) for r in rows) == report.window

    def test_refetch_upserts(self, pipeline: WeatherPipeline, db: sqlite3.Connection):
        pipeline.get_weather("75101", TODAY)
        # A later day makes the stored window stale again
        pipeline.get_weather("75101", "2026-10-23")
        pipeline._refresh_window("75101")

        rows = db.execute(
            "SELECT date, COUNT(*) FROM forecast WHERE insee = ? GROUP BY date",
            ("75101",),
        ).fetchall()
        assert len(rows) == 4
        assert all(r[1] == 1 for r in rows)

    def test_upstream_error_propagates(
        self, pipeline: WeatherPipeline, provider: MagicMock, store: ForecastStore
    ):
        provider.fetch_forecast.side_effect = UpstreamError("boom", status_code=500)
        with pytest.raises(UpstreamError):
            pipeline.get_weather("75101", TODAY)
        assert store.query_rows("75101", TODAY) == []

    def test_short_provider_window(self, pipeline: WeatherPipeline, provider: MagicMock):
        provider.fetch_forecast.return_value = _raw_days()[:2]
        report = pipeline.get_weather("75101", TODAY)
        assert report.statistics.day_count == 2
        assert report.statistics.rain_sum == 30


class TestCacheHit:
    def test_stored_row_today_skips_provider(
        self, pipeline: WeatherPipeline, provider: MagicMock, store: ForecastStore
    ):
        stored = DailyForecast(
            date=TODAY, temperature=11.5, tmin=8, tmax=15, humidity=70,
            weather_code=4, rain_probability=25,
        )
        store.upsert_row("75101", TODAY, encode_details(stored))

        report = pipeline.get_weather("75101", TODAY)

        provider.fetch_forecast.assert_not_called()
        assert report.from_cache is True
        assert report.window == (stored,)
        assert report.statistics.day_count == 1
        assert report.statistics.rain_sum == 25
        assert report.statistics.avg_temperature == 11.5

    def test_second_request_served_from_store(
        self, pipeline: WeatherPipeline, provider: MagicMock
    ):
        first = pipeline.get_weather("75101", TODAY)
        second = pipeline.get_weather("75101", TODAY)
        assert provider.fetch_forecast.call_count == 1
        assert second.from_cache is True
        assert second.window == first.window
        assert second.statistics == first.statistics

    def test_past_rows_ignored(
        self, pipeline: WeatherPipeline, provider: MagicMock, store: ForecastStore
    ):
        store.upsert_row("75101", "2026-10-18", encode_details(DailyForecast(date="2026-10-18")))
        pipeline.get_weather("75101", TODAY)
        provider.fetch_forecast.assert_called_once()

    def test_corrupt_details(self, pipeline: WeatherPipeline, store: ForecastStore):
        store.upsert_row("75101", TODAY, "not json")
        with pytest.raises(StorageError):
            pipeline.get_weather("75101", TODAY)


class TestUnknownLocation:
    def test_not_found_before_any_forecast_access(self, registry: CityRegistry, provider: MagicMock):
        store = MagicMock(spec=ForecastStore)
        pipeline = WeatherPipeline(registry, store, provider)

        with pytest.raises(NotFound):
            pipeline.get_weather("00000", TODAY)

        provider.fetch_forecast.assert_not_called()
        store.has_rows_since.assert_not_called()
        store.query_rows.assert_not_called()
        store.upsert_rows.assert_not_called()


class TestConcurrentMisses:
    def test_single_fetch_per_location(self, registry: CityRegistry, store: ForecastStore):
        provider = MagicMock(spec=MeteoConceptClient)

        def slow_fetch(location, days):
            time.sleep(0.05)
            return _raw_days()

        provider.fetch_forecast.side_effect = slow_fetch
        pipeline = WeatherPipeline(registry, store, provider)

        results = []
        threads = [
            threading.Thread(target=lambda: results.append(pipeline.get_weather("75101", TODAY)))
            for _ in range(4)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert provider.fetch_forecast.call_count == 1
        assert len(results) == 4
        assert all(r.statistics.rain_sum == 100 for r in results)


class TestRowCodec:
    def test_decode_ignores_unknown_keys(self):
        row = StoredForecastRow(
            location="75101", date=TODAY,
            details=json.dumps({"temperature": 5, "legacy_field": 1}),
        )
        day = decode_row(row)
        assert day.temperature == 5
        assert day.date == TODAY
        assert day.rain_probability == 0


class TestLocationLocks:
    def test_one_lock_per_location(self, pipeline: WeatherPipeline):
        assert pipeline._lock_for("75101") is pipeline._lock_for("75101")
        assert pipeline._lock_for("75101") is not pipeline._lock_for("69123")
        assert len(pipeline._locks) == 2
