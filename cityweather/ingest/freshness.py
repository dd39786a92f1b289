"""Freshness check for stored forecast windows."""

from cityweather.storage.stores import ForecastStore


def is_fresh(store: ForecastStore, location: str, today: str) -> bool:
    """Whether stored rows can serve today's request for a location.

    Any row dated today or later makes the whole window fresh, even when fewer
    rows than a full window are stored; no top-up fetch is made. Storage
    failures propagate as StorageError.
    """
    return store.has_rows_since(location, today)
