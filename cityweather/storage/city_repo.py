"""Repository for the city registry."""

import sqlite3


def insert_city(
    conn: sqlite3.Connection,
    insee: str,
    name: str,
    zipcode: str,
    population: int,
) -> None:
    """Insert a city. Raises sqlite3.IntegrityError if the code exists."""
    conn.execute(
        "INSERT INTO city (insee, name, zipcode, population) VALUES (?, ?, ?, ?)",
        (insee, name, zipcode, population),
    )
    conn.commit()


def get_city(conn: sqlite3.Connection, insee: str) -> dict | None:
    row = conn.execute(
        "SELECT insee, name, zipcode, population FROM city WHERE insee = ?",
        (insee,),
    ).fetchone()
    if row is None:
        return None
    return dict(row)


def list_cities(conn: sqlite3.Connection) -> list[dict]:
    """All cities ordered by name."""
    rows = conn.execute(
        "SELECT insee, name, zipcode, population FROM city ORDER BY name"
    ).fetchall()
    return [dict(r) for r in rows]


def count_cities(conn: sqlite3.Connection) -> int:
    row = conn.execute("SELECT COUNT(*) FROM city").fetchone()
    return int(row[0])
