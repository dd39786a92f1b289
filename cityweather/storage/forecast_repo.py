"""Repository for normalized forecast rows."""

import sqlite3


def upsert_forecast(
    conn: sqlite3.Connection, insee: str, date: str, details: str
) -> None:
    """Insert or overwrite the row for (insee, date)."""
    conn.execute(
        "INSERT INTO forecast (insee, date, details) VALUES (?, ?, ?) "
        "ON CONFLICT(insee, date) DO UPDATE SET details = excluded.details",
        (insee, date, details),
    )
    conn.commit()


def has_forecast_since(conn: sqlite3.Connection, insee: str, min_date: str) -> bool:
    """Whether any row exists for the city dated min_date or later."""
    row = conn.execute(
        "SELECT 1 FROM forecast WHERE insee = ? AND date >= ? LIMIT 1",
        (insee, min_date),
    ).fetchone()
    return row is not None


def get_forecasts_since(
    conn: sqlite3.Connection, insee: str, min_date: str, limit: int | None = None
) -> list[dict]:
    """Rows dated min_date or later, ordered by date ascending."""
    sql = (
        "SELECT insee, date, details FROM forecast "
        "WHERE insee = ? AND date >= ? ORDER BY date"
    )
    params: tuple = (insee, min_date)
    if limit is not None:
        sql += " LIMIT ?"
        params = (insee, min_date, limit)
    return [dict(r) for r in conn.execute(sql, params).fetchall()]


def upsert_forecasts(
    conn: sqlite3.Connection, insee: str, rows: list[tuple[str, str]]
) -> None:
    """Upsert several (date, details) rows for one city in a single transaction."""
    with conn:
        conn.executemany(
            "INSERT INTO forecast (insee, date, details) VALUES (?, ?, ?) "
            "ON CONFLICT(insee, date) DO UPDATE SET details = excluded.details",
            [(insee, date, details) for date, details in rows],
        )
