"""Persistence adapters handed to the pipeline.

Both adapters wrap one shared SQLite connection. A lock serializes access so
concurrent requests never interleave statements on the connection, and every
sqlite3 failure is translated into StorageError at this boundary.
"""

import logging
import sqlite3
import threading

from cityweather.errors import CityExists, NotFound, StorageError
from cityweather.models.city import CityInfo
from cityweather.models.forecast import StoredForecastRow
from cityweather.storage import city_repo, forecast_repo

logger = logging.getLogger(__name__)


class _SqliteAdapter:
    def __init__(self, conn: sqlite3.Connection, lock=None):
        self.conn = conn
        self.lock = lock or threading.RLock()


class ForecastStore(_SqliteAdapter):
    def has_rows_since(self, location: str, min_date: str) -> bool:
        try:
            with self.lock:
                return forecast_repo.has_forecast_since(self.conn, location, min_date)
        except sqlite3.Error as e:
            logger.error("Forecast lookup failed for %s: %s", location, e)
            raise StorageError(f"Failed to read forecast for {location}: {e}") from e

    def query_rows(
        self, location: str, min_date: str, limit: int | None = None
    ) -> list[StoredForecastRow]:
        try:
            with self.lock:
                rows = forecast_repo.get_forecasts_since(
                    self.conn, location, min_date, limit
                )
        except sqlite3.Error as e:
            logger.error("Forecast query failed for %s: %s", location, e)
            raise StorageError(f"Failed to read forecast for {location}: {e}") from e
        return [
            StoredForecastRow(location=r["insee"], date=r["date"], details=r["details"])
            for r in rows
        ]

    def upsert_row(self, location: str, date: str, details: str) -> None:
        """Insert or overwrite the row keyed by (location, date)."""
        try:
            with self.lock:
                forecast_repo.upsert_forecast(self.conn, location, date, details)
        except sqlite3.Error as e:
            logger.error("Forecast upsert failed for %s on %s: %s", location, date, e)
            raise StorageError(
                f"Failed to store forecast for {location} on {date}: {e}"
            ) from e

    def upsert_rows(self, location: str, rows: list[tuple[str, str]]) -> None:
        """Upsert a whole window of (date, details) rows atomically."""
        try:
            with self.lock:
                forecast_repo.upsert_forecasts(self.conn, location, rows)
        except sqlite3.Error as e:
            logger.error("Forecast upsert failed for %s: %s", location, e)
            raise StorageError(f"Failed to store forecast for {location}: {e}") from e


class CityRegistry(_SqliteAdapter):
    def lookup(self, location: str) -> CityInfo:
        try:
            with self.lock:
                row = city_repo.get_city(self.conn, location)
        except sqlite3.Error as e:
            logger.error("City lookup failed for %s: %s", location, e)
            raise StorageError(f"Failed to read city {location}: {e}") from e
        if row is None:
            raise NotFound(location)
        return CityInfo(**row)

    def exists(self, location: str) -> bool:
        try:
            self.lookup(location)
        except NotFound:
            return False
        return True

    def list_cities(self) -> list[CityInfo]:
        try:
            with self.lock:
                rows = city_repo.list_cities(self.conn)
        except sqlite3.Error as e:
            logger.error("City listing failed: %s", e)
            raise StorageError(f"Failed to list cities: {e}") from e
        return [CityInfo(**r) for r in rows]

    def add(self, city: CityInfo) -> CityInfo:
        try:
            with self.lock:
                city_repo.insert_city(
                    self.conn, city.insee, city.name, city.zipcode, city.population
                )
        except sqlite3.IntegrityError as e:
            raise CityExists(city.insee) from e
        except sqlite3.Error as e:
            logger.error("City insert failed for %s: %s", city.insee, e)
            raise StorageError(f"Failed to add city {city.insee}: {e}") from e
        logger.info("Added city %s (%s)", city.insee, city.name)
        return city
