"""Shared test fixtures."""

import json
import sqlite3
from pathlib import Path

import pytest
import yaml

from cityweather.config.defaults import DEFAULT_CITIES
from cityweather.config.schema import AppConfig
from cityweather.storage.database import open_database
from cityweather.storage.stores import CityRegistry, ForecastStore

TODAY = "2026-10-19"


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def paris_daily(fixtures_dir: Path) -> dict:
    with open(fixtures_dir / "meteo_concept_daily_paris.json") as f:
        return json.load(f)


@pytest.fixture
def bordeaux_next_hours(fixtures_dir: Path) -> dict:
    with open(fixtures_dir / "meteo_concept_next_hours_bordeaux.json") as f:
        return json.load(f)


@pytest.fixture
def default_config() -> AppConfig:
    """Return default AppConfig with default cities."""
    return AppConfig(cities=DEFAULT_CITIES)


@pytest.fixture
def db(tmp_path: Path) -> sqlite3.Connection:
    """Migrated database seeded with the default cities."""
    conn = open_database(tmp_path / "test.db", DEFAULT_CITIES)
    yield conn
    conn.close()


@pytest.fixture
def registry(db: sqlite3.Connection) -> CityRegistry:
    return CityRegistry(db)


@pytest.fixture
def store(db: sqlite3.Connection, registry: CityRegistry) -> ForecastStore:
    return ForecastStore(db, lock=registry.lock)


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "provider": {"token": "test-token", "timeout_seconds": 3.0},
        "storage": {"db_path": str(tmp_path / "weather.db")},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path
