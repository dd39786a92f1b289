"""Common types and helpers shared across models."""

import re
from datetime import UTC, datetime
from typing import TypeAlias

Location: TypeAlias = str

LOCATION_PATTERN = re.compile(r"^\d{5,6}$")


def is_valid_location(location: str) -> bool:
    return bool(LOCATION_PATTERN.match(location))


def utc_now() -> datetime:
    return datetime.now(UTC)


def today_iso() -> str:
    """Today's calendar date in UTC, the day boundary used for cache freshness."""
    return utc_now().date().isoformat()
