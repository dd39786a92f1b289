"""SQLite connection manager with WAL mode and migration support."""

import importlib
import logging
import sqlite3
from pathlib import Path

from cityweather.config.schema import CityConfig
from cityweather.storage import city_repo

logger = logging.getLogger(__name__)

MIGRATIONS_PACKAGE = "cityweather.storage.migrations"


def connect(db_path: str | Path, timeout: float = 5.0) -> sqlite3.Connection:
    """Open a SQLite connection with WAL mode and foreign keys enabled.

    The connection may be shared across threads; callers serialize access.
    """
    if str(db_path) != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), timeout=timeout, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def run_migrations(conn: sqlite3.Connection) -> list[str]:
    """Run all pending migrations in order. Returns list of applied migration names."""
    conn.execute(
        "CREATE TABLE IF NOT EXISTS schema_versions ("
        "  version TEXT PRIMARY KEY,"
        "  applied_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP"
        ")"
    )
    conn.commit()

    applied = {
        row[0]
        for row in conn.execute("SELECT version FROM schema_versions").fetchall()
    }

    newly_applied = []
    for name in _discover_migrations():
        if name not in applied:
            mod = importlib.import_module(f"{MIGRATIONS_PACKAGE}.{name}")
            mod.up(conn)
            conn.execute(
                "INSERT INTO schema_versions (version) VALUES (?)", (name,)
            )
            conn.commit()
            newly_applied.append(name)
            logger.info("Applied migration %s", name)

    return newly_applied


def seed_cities(conn: sqlite3.Connection, cities: list[CityConfig]) -> int:
    """Insert seed cities when the registry is empty. Returns the number inserted."""
    if city_repo.count_cities(conn) > 0:
        logger.info("Cities already exist, skipping seed data")
        return 0
    for city in cities:
        city_repo.insert_city(
            conn, city.insee, city.name, city.zipcode, city.population
        )
    logger.info("Inserted %d seed cities", len(cities))
    return len(cities)


def open_database(
    db_path: str | Path, cities: list[CityConfig], timeout: float = 5.0
) -> sqlite3.Connection:
    """Connect, migrate and seed. The returned connection is shared process-wide."""
    conn = connect(db_path, timeout=timeout)
    run_migrations(conn)
    seed_cities(conn, cities)
    return conn


def _discover_migrations() -> list[str]:
    """Discover migration modules by naming convention v###_*.py."""
    migrations_dir = Path(__file__).parent / "migrations"
    return sorted(p.stem for p in migrations_dir.glob("v[0-9]*_*.py"))
