"""Initial schema: city registry and per-day forecast rows."""

import sqlite3

DDL = [
    # City registry, keyed by INSEE code
    """
    CREATE TABLE IF NOT EXISTS city (
        insee TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        zipcode TEXT NOT NULL,
        population INTEGER NOT NULL
    )
    """,

    # Normalized forecast days, one row per (insee, date)
    """
    CREATE TABLE IF NOT EXISTS forecast (
        insee TEXT NOT NULL,
        date TEXT NOT NULL,
        details TEXT NOT NULL,
        PRIMARY KEY (insee, date),
        FOREIGN KEY (insee) REFERENCES city (insee) ON DELETE CASCADE
    )
    """,
]


def up(conn: sqlite3.Connection) -> None:
    for stmt in DDL:
        conn.execute(stmt)
    conn.commit()
